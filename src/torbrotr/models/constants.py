"""Shared constants for the models layer.

Defines the closed vocabularies that appear in relay records. Placing them
here keeps the record modules free of circular imports.

See Also:
    [RelayStatusEntry][torbrotr.models.status.RelayStatusEntry]: Stores the
        [RouterFlag][torbrotr.models.constants.RouterFlag] values of an
        ``s`` line.
    [ExitPattern][torbrotr.models.descriptor.ExitPattern]: Uses
        [PolicyAction][torbrotr.models.constants.PolicyAction].
"""

from __future__ import annotations

from enum import StrEnum


class RouterFlag(StrEnum):
    """The fixed vocabulary of relay status flags.

    Member order is the canonical order used when a record is rendered as a
    string. Tokens outside this vocabulary are ignored by the decoder.
    """

    AUTHORITY = "Authority"
    BAD_EXIT = "BadExit"
    EXIT = "Exit"
    FAST = "Fast"
    GUARD = "Guard"
    HSDIR = "HSDir"
    NAMED = "Named"
    STABLE = "Stable"
    RUNNING = "Running"
    UNNAMED = "Unnamed"
    VALID = "Valid"
    V2DIR = "V2Dir"

    @classmethod
    def lookup(cls, token: str) -> RouterFlag | None:
        """Return the flag spelled exactly *token*, or ``None``."""
        return cls._value2member_map_.get(token)  # type: ignore[return-value]


class PolicyAction(StrEnum):
    """Exit policy rule action."""

    ACCEPT = "accept"
    REJECT = "reject"


class DocumentType(StrEnum):
    """Type names of the supported directory documents.

    The values are the names used in ``@type`` annotations.
    """

    SERVER_DESCRIPTOR = "server-descriptor"
    CONSENSUS = "network-status-consensus-3"
    BRIDGE_NETWORK_STATUS = "bridge-network-status"


PORT_MAX = 65_535
FINGERPRINT_HEX_LENGTH = 40
