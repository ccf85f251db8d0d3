"""Exception hierarchy for trust-protocol.

Only snapshot deserialization raises during normal operation. Scoring,
chain verification, credential verification, and policy evaluation are
total over their inputs and report failure through return values.
"""
from __future__ import annotations


class TrustProtocolError(Exception):
    """Base class for all trust-protocol errors."""


class SchemaMismatchError(TrustProtocolError, ValueError):
    """Raised when a snapshot carries a missing or foreign schema tag.

    Parameters
    ----------
    expected:
        The schema tag this library reads and writes.
    actual:
        The tag found in the snapshot, or None if absent.
    """

    def __init__(self, expected: str, actual: object) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Invalid snapshot schema: expected {expected!r}, got {actual!r}."
        )


class SnapshotFormatError(TrustProtocolError, ValueError):
    """Raised when a snapshot has the right schema tag but malformed content."""
