"""TrustLevel enumeration and level derivation from overall scores.

Six trust levels are defined. Level boundaries use half-open intervals so
that each score in [0, 1] maps to exactly one level; the highest level whose
floor does not exceed the score wins.
"""
from __future__ import annotations

from enum import IntEnum


class TrustLevel(IntEnum):
    """Discretized trust tiers, ordered so that higher integers mean more trust.

    UNTRUSTED (0):   overall score in [0, 0.2)
    PROVISIONAL (1): [0.2, 0.4)
    BASIC (2):       [0.4, 0.6)
    ESTABLISHED (3): [0.6, 0.75)
    HIGH (4):        [0.75, 0.9)
    EXEMPLARY (5):   [0.9, 1.0]

    On the wire a level is its lowercase name (see :attr:`label`).
    """

    UNTRUSTED = 0
    PROVISIONAL = 1
    BASIC = 2
    ESTABLISHED = 3
    HIGH = 4
    EXEMPLARY = 5

    @property
    def label(self) -> str:
        """Lowercase interchange name, e.g. ``"established"``."""
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "TrustLevel":
        """Resolve an interchange name (case-insensitive) to a TrustLevel.

        Raises
        ------
        ValueError
            If *label* names no level.
        """
        try:
            return cls[label.upper()]
        except KeyError:
            raise ValueError(f"Unknown trust level {label!r}.") from None


# Minimum overall score required to reach each level.
LEVEL_THRESHOLDS: dict[TrustLevel, float] = {
    TrustLevel.UNTRUSTED: 0.0,
    TrustLevel.PROVISIONAL: 0.2,
    TrustLevel.BASIC: 0.4,
    TrustLevel.ESTABLISHED: 0.6,
    TrustLevel.HIGH: 0.75,
    TrustLevel.EXEMPLARY: 0.9,
}


def derive_level(overall_score: float) -> TrustLevel:
    """Map an overall trust score to a TrustLevel.

    Scores below zero map to UNTRUSTED.

    Parameters
    ----------
    overall_score:
        Overall trust score (0 – 1).

    Returns
    -------
    TrustLevel
    """
    level = TrustLevel.UNTRUSTED
    for candidate, threshold in sorted(LEVEL_THRESHOLDS.items(), key=lambda kv: kv[1]):
        if overall_score >= threshold:
            level = candidate
    return level


def level_floor(level: TrustLevel) -> float:
    """Return the minimum overall score that reaches *level*."""
    return LEVEL_THRESHOLDS[level]
