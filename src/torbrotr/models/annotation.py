"""Document type annotations (``@type <name> <major>.<minor>``)."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ._validation import validate_str_no_null, validate_uint


_ANNOTATION_RE = re.compile(r"^@type (\S+) (\d+)\.(\d+)$")


@dataclass(frozen=True, slots=True)
class Annotation:
    """The type tag that heads every directory document.

    Examples:
        ```python
        annotation = Annotation.parse("@type network-status-consensus-3 1.0")
        annotation.type    # 'network-status-consensus-3'
        str(annotation)    # '@type network-status-consensus-3 1.0'
        ```
    """

    type: str
    major: int
    minor: int

    def __post_init__(self) -> None:
        validate_str_no_null(self.type, "type")
        validate_uint(self.major, "major")
        validate_uint(self.minor, "minor")

    @classmethod
    def parse(cls, line: str) -> Annotation:
        """Parse one annotation line (surrounding whitespace ignored).

        Raises:
            ValueError: If *line* is not a ``@type`` annotation.
        """
        match = _ANNOTATION_RE.match(line.strip())
        if match is None:
            raise ValueError(f"not a type annotation: {line.strip()!r}")
        return cls(match.group(1), int(match.group(2)), int(match.group(3)))

    @property
    def version(self) -> str:
        return f"{self.major}.{self.minor}"

    def __str__(self) -> str:
        return f"@type {self.type} {self.version}"
