"""
Pytest configuration and shared fixtures for TorBrotr tests.

Provides:
- Raw status entries, descriptors and whole documents
- Decoded records and populated stores
- Reader doubles for chunked and asynchronous sources
"""

from __future__ import annotations

import asyncio
import io
import logging
import time
from datetime import UTC, datetime

import pytest

from torbrotr.models import ObjectStore, RelayStatusEntry
from torbrotr.parsing import decode_status_entry


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Raw records
# ============================================================================

SEELE = (
    "r seele AAoQ1DAR6kkoo19hBAX5K0QztNw bdrzhG0Kk/8DUsnSdmzj7DjFQjY "
    "2014-12-08 12:27:05 73.15.150.172 9001 0\n"
    "s Fast Running Stable Valid\n"
    "v Tor 0.2.5.10\n"
    "w Bandwidth=18\n"
    "p reject 1-65535\n"
)

KARLSTAD0 = (
    "r Karlstad0 m5TNC3uAV+ryG6fwI7ehyMqc5kU f1g9KQhgS0r6+H/7dzAJOpi6lG8 "
    "2014-12-08 06:57:54 193.11.166.194 9000 80\n"
    "a [2002:470:6e:80d::2]:22\n"
    "s Fast Guard HSDir Running Stable V2Dir Valid\n"
    "v Tor 0.2.4.23\n"
    "w Bandwidth=2670\n"
    "p reject 1-65535\n"
)

KARLSTAD1 = (
    "r Karlstad1 zO8CqkVMCrD+GsaDBPbYxCIMGRI pR21zIq4gZQmZOj2FvRwNO5U+K0 "
    "2014-12-08 06:57:49 193.11.166.194 9001 0\n"
    "a [2a02:2430:3:2500::5fa3:1ef5]:9001\n"
    "s Fast Guard Running Stable Valid\n"
    "v Tor 0.2.4.23\n"
    "w Bandwidth=2290\n"
    "p reject 1-65535\n"
)

KARLSTAD2 = (
    "r Karlstad2 e9hMtjhF4NYcHPqDkUobjJaEgrE eu8/9NajsgwD6+/vlObfyk2bZjo "
    "2014-12-08 12:24:43 81.170.149.212 9001 0\n"
    "a [2a02:418:1007:b::48]:443\n"
    "s Fast Running Stable Valid\n"
    "v Tor 0.2.3.25\n"
    "w Bandwidth=778\n"
    "p reject 1-65535\n"
)

KARLSTAD1_FINGERPRINT = "CCEF02AA454C0AB0FE1AC68304F6D8C4220C1912"

SIGNATURE = (
    "directory-signature 5420FD8EA46BD4290F1D07A1883C9D85ECC486C4 "
    "CCB7170F6B270B44301712DD7BC04BF9515AF374\n"
    "-----BEGIN SIGNATURE-----\n"
    "aGVsbG8gd29ybGQ=\n"
    "-----END SIGNATURE-----\n"
)

CONSENSUS_HEADER = (
    "network-status-version 3\n"
    "vote-status consensus\n"
    "consensus-method 18\n"
    "valid-after 2014-12-08 16:00:00\n"
    "fresh-until 2014-12-08 17:00:00\n"
    "valid-until 2014-12-08 19:00:00\n"
    "voting-delay 300 300\n"
    "known-flags Authority BadExit Exit Fast Guard HSDir Named Running Stable Unnamed V2Dir Valid\n"
    "shared-rand-previous-value 9 CMiqEw+6Dsot433qR+5WOEcDABGgJDbFozSFmudJlRg=\n"
    "shared-rand-current-value 9 bf6tbPKCMgt2fHCUcJ2FqKLtM6EER3E5uu4CVtE2erg=\n"
    "dir-source tor26 14C131DFC5C6F93646BE72FA1401C02A8DF2E8B4 86.59.21.38 86.59.21.38 80 443\n"
    "contact Peter Palfrader\n"
    "vote-digest 0E3E5DBDB4D5F0F85C8C1C5B7E1A1E2D0F4AE8E1\n"
)

DESCRIPTOR_LETFREEDOMRING = """router LetFreedomRing 24.233.74.111 9001 0 0
platform Tor 0.2.6.1-alpha on Linux
protocols Link 1 2 Circuit 1
published 2014-12-05 22:01:13
fingerprint DA4D EC93 C8D2 F187 C027 A96D 3925 C153 1D90 A89E
uptime 339587
bandwidth 20480 20480 16996
extra-info-digest 15FA36289DD75D89B389CED0BE23D80FB50629BD
onion-key
-----BEGIN RSA PUBLIC KEY-----
MIGJAoGBALD6Dbj1okBj4mmz/sCgIGFJk/CTWlMsT3CS1kP7Q2gAaDewEbo1+me3
X5f3QpvZ9Yh2l5Q+btU4a/Yib3pg/KhyX96Z5zrvz9dGPPXGORpwawMIH7Aa+jtp
v2l0misfGCloIamfI5dzayTu9gR4emuKm34tipkfIz6hLkO7xW1nAgMBAAE=
-----END RSA PUBLIC KEY-----
signing-key
-----BEGIN RSA PUBLIC KEY-----
MIGJAoGBAM6sVv1ASHBuLe8l3+cF4xATk1n/CqNRqML0Gra0S9UaBnKakm9tk7Vw
PJifL3B318lRDjAE2wTVyM+437TLaROLNBrQOF2apjgJYH661vPFG5Uw6+8CXv6w
tHeXU1pvc/E7SA0IpUjm80z0HhSA3oGwuP4IEB1U1IxxiJNFaBk7AgMBAAE=
-----END RSA PUBLIC KEY-----
hidden-service-dir
contact 0xCDD0190B Craig Andrews <candrews@integralblue.com>
ntor-onion-key q8Qg9PaoBm59j7cEJcOrzTUazVt3D8Ax4L3oaO8PaxU=
reject 0.0.0.0/8:*
reject 169.254.0.0/16:*
reject 127.0.0.0/8:*
reject 192.168.0.0/16:*
reject 10.0.0.0/8:*
reject 172.16.0.0/12:*
reject 24.233.74.111:*
accept *:22
accept *:465
accept *:993
accept *:994
accept *:995
accept *:6660-6697
reject *:*
router-signature
-----BEGIN SIGNATURE-----
vKWlPhEDoRHOKgDNXE07HFl39b4SmGUDo8DStSzzza+CKVw2RnV41wYBpjRJvu2Q
VcQb00bfqWP/DK38GmVMgzKRZ7e1k2TpzaeL3ssD3gS6wJPzbIbcL++yUhtPukk/
tWJ53g/ru8Hiy+h9Wa5gI+Eog/z4hj36GBiaTXJoG3M=
-----END SIGNATURE-----
"""

DESCRIPTOR_LEENUTS = """router leenuts 46.14.245.206 9001 0 0
platform Tor 0.2.4.24 on Linux
protocols Link 1 2 Circuit 1
published 2014-12-08 14:01:26
opt fingerprint F8E9 F7D3 0ED7 F541 FD24 8945 FAA2 B593 AD5E 584D
uptime 86315
bandwidth 153600 204800 0
extra-info-digest 218F94A27A33285CF3BFE9E8A737CCE91503AC53
or-address [2001:470:1f0b:1c::2]:9001
family $9695DFC35FFEB861329B9F1AB04C46397020CE31 $da4dec93c8d2f187c027a96d3925c1531d90a89e~LetFreedomRing moria1
onion-key
-----BEGIN RSA PUBLIC KEY-----
MIGJAoGBAL+3UeGGF7xExy3z58T3Xu9uWabYpmub5bATZ+yLia9crsLrLEIaAsJ9
oa3XMbC1bOL0FBJj6WhrFJvwDw49yGKze5b9n8e4SRsZANLzkUr9vLmhXLnnkfvs
rBu1PNDpBaQjQ2AviEwwWcJjf4imUtlsv94M5F/NEO1E1LyU/rDPAgMBAAE=
-----END RSA PUBLIC KEY-----
signing-key
-----BEGIN RSA PUBLIC KEY-----
MIGJAoGBAL7ZgD+iMdXECit8bkXInwwvLbVg8fbZ352CvzGdW38nCYj5yo+tv7Vc
/gYknyKSjUKslfz7cE7Ez8ssWY3ijHQzrguRFyIC4iYDR9gW/Ko1ea8E9du5prxq
7vJXKjPtze2AMqauABmCjBE6RlT3tPBy1NrklYDy8T7q4qoTVXO9AgMBAAE=
-----END RSA PUBLIC KEY-----
hibernating 1
hidden-service-dir
ntor-onion-key 8tAylcNZrA23N3iBPMsHGB8AYz9iHwqgaS6qAx3qVxA=
reject *:*
router-signature
-----BEGIN SIGNATURE-----
niSWXFuWh/U/iyHzGa69mNynIKlkXA953Rs+vSfGcX7FMZ7/aMp3w/FcU9GQsgbt
POl7qz1m+xho4CJnhlMqLhomUas7AZ02jvIvMlKajw51nhM+eFwl3hwlTyAJ0tov
Oa5fhjBu72rul97Aa4bJPZKa+RJNCGUKJuFGoAlZV7I=
-----END SIGNATURE-----
"""


@pytest.fixture
def seele_raw() -> str:
    """Status entry used by the tokenizer boundary scenarios."""
    return SEELE


@pytest.fixture
def karlstad_raws() -> tuple[str, str, str]:
    """Three status entries with IPv6 ``a`` lines."""
    return KARLSTAD0, KARLSTAD1, KARLSTAD2


@pytest.fixture
def karlstad1_fingerprint() -> str:
    return KARLSTAD1_FINGERPRINT


@pytest.fixture
def signature() -> str:
    """Terminal section of a network status document."""
    return SIGNATURE


@pytest.fixture
def consensus_header() -> str:
    """Header lines of a consensus, up to its first ``r`` line."""
    return CONSENSUS_HEADER


@pytest.fixture
def consensus_text() -> str:
    """A complete (annotation-stripped) consensus with four entries."""
    return CONSENSUS_HEADER + SEELE + KARLSTAD0 + KARLSTAD1 + KARLSTAD2 + SIGNATURE


@pytest.fixture
def bridge_status_text() -> str:
    """A bridge network status that ends without a terminal section."""
    return "published 2014-12-08 16:00:00\nflag-thresholds stable-uptime=0\n" + KARLSTAD0 + KARLSTAD1


@pytest.fixture
def descriptor_raws() -> tuple[str, str]:
    return DESCRIPTOR_LETFREEDOMRING, DESCRIPTOR_LEENUTS


@pytest.fixture
def descriptors_text() -> str:
    """Two server descriptors as published in one file, annotation included."""
    return "@type server-descriptor 1.0\n" + DESCRIPTOR_LETFREEDOMRING + DESCRIPTOR_LEENUTS


# ============================================================================
# Decoded records and stores
# ============================================================================


@pytest.fixture
def karlstad_entries() -> tuple[RelayStatusEntry, RelayStatusEntry, RelayStatusEntry]:
    return (
        decode_status_entry(KARLSTAD0),
        decode_status_entry(KARLSTAD1),
        decode_status_entry(KARLSTAD2),
    )


@pytest.fixture
def entry_factory():
    """Build minimal status entries with a given fingerprint and nickname."""

    def _make(fingerprint: str, nickname: str = "relay", **kwargs) -> RelayStatusEntry:
        kwargs.setdefault("published", datetime(2014, 12, 8, tzinfo=UTC))
        return RelayStatusEntry(fingerprint=fingerprint, nickname=nickname, **kwargs)

    return _make


@pytest.fixture
def store_factory(entry_factory):
    """Build a store holding one entry per fingerprint, nicknamed after its key."""

    def _make(*fingerprints: str) -> ObjectStore[RelayStatusEntry]:
        store: ObjectStore[RelayStatusEntry] = ObjectStore()
        for fingerprint in fingerprints:
            store.set(fingerprint, entry_factory(fingerprint, nickname=f"n{fingerprint}"))
        return store

    return _make


# ============================================================================
# Source doubles
# ============================================================================


class ChunkedReader:
    """Serves a text in fixed pieces regardless of the requested size."""

    def __init__(self, data: str | bytes, piece: int) -> None:
        self._data = data
        self._piece = piece
        self._pos = 0
        self.reads = 0

    def read(self, size: int = -1) -> str | bytes:
        self.reads += 1
        piece = self._data[self._pos : self._pos + min(size, self._piece)]
        self._pos += len(piece)
        return piece


class SlowReader(ChunkedReader):
    """Blocking source that sleeps before serving every piece."""

    def __init__(self, data: str | bytes, piece: int, delay: float) -> None:
        super().__init__(data, piece)
        self._delay = delay

    def read(self, size: int = -1) -> str | bytes:
        time.sleep(self._delay)
        return super().read(size)


class AsyncReader:
    """``asyncio.StreamReader``-like source over an in-memory text."""

    def __init__(self, data: str | bytes) -> None:
        self._stream = io.BytesIO(data) if isinstance(data, bytes) else io.StringIO(data)

    async def read(self, size: int = -1) -> str | bytes:
        await asyncio.sleep(0)
        return self._stream.read(size)


@pytest.fixture
def chunked_reader():
    return ChunkedReader


@pytest.fixture
def async_reader():
    return AsyncReader


@pytest.fixture
def slow_reader():
    return SlowReader
