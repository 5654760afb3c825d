"""
Unit tests for parsing.status module.

Tests:
- decode_status_entry() on real consensus entries
- Optional lines (a/s/v/w/p) and their defaults
- FieldDecodeError for identity line failures
- extract_status_fingerprint() / StatusEntryCodec
"""

from datetime import UTC, datetime
from ipaddress import IPv4Address, IPv6Address

import pytest

from torbrotr.core.exceptions import FieldDecodeError
from torbrotr.models import RouterFlag
from torbrotr.parsing import StatusEntryCodec, decode_status_entry, extract_status_fingerprint


IDENTITY = "r seele AAoQ1DAR6kkoo19hBAX5K0QztNw bdrzhG0Kk/8DUsnSdmzj7DjFQjY 2014-12-08 12:27:05 73.15.150.172 9001 0\n"


# =============================================================================
# Full entries
# =============================================================================


class TestDecodeSeele:
    @pytest.fixture
    def entry(self, seele_raw):
        return decode_status_entry(seele_raw)

    def test_identity(self, entry):
        assert entry.nickname == "seele"
        assert entry.fingerprint == "000A10D43011EA4928A35F610405F92B4433B4DC"
        assert entry.digest == "6DDAF3846D0A93FF0352C9D2766CE3EC38C54236"
        assert entry.published == datetime(2014, 12, 8, 12, 27, 5, tzinfo=UTC)

    def test_address(self, entry):
        assert entry.address.ipv4_address == IPv4Address("73.15.150.172")
        assert entry.address.ipv4_or_port == 9001
        assert entry.address.ipv4_dir_port == 0
        assert entry.address.ipv6_address is None

    def test_flags(self, entry):
        assert entry.flags == frozenset({"Fast", "Running", "Stable", "Valid"})

    def test_version_bandwidth_policy(self, entry):
        assert entry.version == "Tor"
        assert entry.version_number == "0.2.5.10"
        assert entry.bandwidth == 18
        assert entry.measured == 0
        assert entry.unmeasured is False
        assert entry.accept is False
        assert entry.port_list == "1-65535"


class TestDecodeKarlstad:
    def test_fingerprints(self, karlstad_entries):
        assert [e.fingerprint for e in karlstad_entries] == [
            "9B94CD0B7B8057EAF21BA7F023B7A1C8CA9CE645",
            "CCEF02AA454C0AB0FE1AC68304F6D8C4220C1912",
            "7BD84CB63845E0D61C1CFA83914A1B8C968482B1",
        ]

    def test_ipv6_from_a_line(self, karlstad_entries):
        address = karlstad_entries[0].address
        assert address.ipv6_address == IPv6Address("2002:470:6e:80d::2")
        assert address.ipv6_or_port == 22
        assert str(address) == "193.11.166.194|9000|80,2002:470:6e:80d::2|22"

    def test_digest(self, karlstad_entries):
        assert karlstad_entries[0].digest == "7F583D2908604B4AFAF87FFB7730093A98BA946F"

    def test_hsdir_flag(self, karlstad_entries):
        assert karlstad_entries[0].has_flag(RouterFlag.HSDIR)
        assert not karlstad_entries[1].has_flag(RouterFlag.HSDIR)


# =============================================================================
# Optional lines
# =============================================================================


class TestOptionalLines:
    def test_identity_only(self):
        entry = decode_status_entry(IDENTITY)
        assert entry.flags == frozenset()
        assert entry.version == ""
        assert entry.bandwidth == 0
        assert entry.port_list == ""

    def test_unknown_flags_ignored(self):
        entry = decode_status_entry(IDENTITY + "s Fast StaleDesc Sybil Valid\n")
        assert entry.flags == frozenset({"Fast", "Valid"})

    def test_ipv4_a_line_ignored(self):
        entry = decode_status_entry(IDENTITY + "a 10.0.0.1:443\n")
        assert entry.address.ipv6_address is None

    def test_last_ipv6_a_line_wins(self):
        entry = decode_status_entry(IDENTITY + "a [::1]:1\na [::2]:2\n")
        assert entry.address.ipv6_address == IPv6Address("::2")
        assert entry.address.ipv6_or_port == 2

    def test_weights(self):
        entry = decode_status_entry(IDENTITY + "w Bandwidth=20 Measured=35 Unmeasured=1\n")
        assert entry.bandwidth == 20
        assert entry.measured == 35
        assert entry.unmeasured is True

    def test_bad_bandwidth_degrades(self):
        assert decode_status_entry(IDENTITY + "w Bandwidth=lots\n").bandwidth == 0

    def test_accept_policy(self):
        entry = decode_status_entry(IDENTITY + "p accept 80,443\n")
        assert entry.accept is True
        assert entry.port_list == "80,443"

    def test_version_without_number(self):
        entry = decode_status_entry(IDENTITY + "v Tor\n")
        assert entry.version == "Tor"
        assert entry.version_number == ""

    def test_unknown_keywords_ignored(self):
        entry = decode_status_entry(IDENTITY + "m 8,9 sha256=abc\nid ed25519 none\n")
        assert entry.nickname == "seele"

    def test_out_of_range_port_degrades(self):
        raw = IDENTITY.replace(" 9001 0\n", " 99999 0\n")
        assert decode_status_entry(raw).address.ipv4_or_port == 0


# =============================================================================
# Failures
# =============================================================================


class TestFailures:
    def test_no_identity_line(self):
        with pytest.raises(FieldDecodeError, match="no identity line"):
            decode_status_entry("s Fast\nv Tor 0.2.5.10\n")

    def test_truncated_identity_line(self):
        with pytest.raises(FieldDecodeError) as exc_info:
            decode_status_entry("r seele AAoQ1DAR6kkoo19hBAX5K0QztNw\n")
        assert exc_info.value.keyword == "r"

    def test_bad_identity_encoding(self):
        with pytest.raises(FieldDecodeError, match="invalid base64"):
            decode_status_entry(IDENTITY.replace("AAoQ1DAR6kkoo19hBAX5K0QztNw", "not*base64"))

    def test_bad_timestamp(self):
        with pytest.raises(FieldDecodeError, match="invalid timestamp"):
            decode_status_entry(IDENTITY.replace("12:27:05", "25:99:99"))

    def test_bad_ipv4(self):
        with pytest.raises(FieldDecodeError):
            decode_status_entry(IDENTITY.replace("73.15.150.172", "73.15.150"))

    def test_bad_ipv6_a_line(self):
        with pytest.raises(FieldDecodeError):
            decode_status_entry(IDENTITY + "a [zz::1]:22\n")


# =============================================================================
# Cheap identity extraction
# =============================================================================


class TestExtractFingerprint:
    def test_matches_full_decode(self, karlstad_raws):
        for raw in karlstad_raws:
            assert extract_status_fingerprint(raw) == decode_status_entry(raw).fingerprint

    def test_ignores_broken_other_lines(self, karlstad1_fingerprint, karlstad_raws):
        raw = karlstad_raws[1] + "a [not-an-address]:1\n"
        assert extract_status_fingerprint(raw) == karlstad1_fingerprint

    def test_missing_identity(self):
        with pytest.raises(FieldDecodeError):
            extract_status_fingerprint("s Fast\n")

    def test_codec(self, seele_raw):
        codec = StatusEntryCodec()
        assert codec.extract_fingerprint(seele_raw) == "000A10D43011EA4928A35F610405F92B4433B4DC"
        assert codec.decode(seele_raw).nickname == "seele"
