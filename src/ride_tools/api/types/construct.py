"""Construct-level result types.

Provides dataclasses for listing constructs and reporting their ratings.
"""

from __future__ import annotations

from dataclasses import dataclass

from ride_tools.world.base import ConstructInfo


@dataclass
class ConstructSummary:
    """A construct as listed by ``listAll``.

    Attributes:
        id: Construct id
        name: Display name
        type: Ride type id
    """

    id: int
    name: str
    type: int

    @classmethod
    def from_info(cls, info: ConstructInfo) -> ConstructSummary:
        return cls(id=info.id, name=info.name, type=info.type)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"id": self.id, "name": self.name, "type": self.type}


@dataclass
class RideStats:
    """Normalized ratings of a construct.

    The world reports ratings as fixed two-decimal integers (652 means 6.52)
    and uses a negative value for "not computed yet"; those become None.

    Attributes:
        excitement: Excitement rating, or None
        intensity: Intensity rating, or None
        nausea: Nausea rating, or None
    """

    excitement: float | None
    intensity: float | None
    nausea: float | None

    @classmethod
    def from_info(cls, info: ConstructInfo) -> RideStats:
        return cls(
            excitement=_normalize(info.excitement),
            intensity=_normalize(info.intensity),
            nausea=_normalize(info.nausea),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "excitement": self.excitement,
            "intensity": self.intensity,
            "nausea": self.nausea,
        }


def _normalize(raw: int) -> float | None:
    return raw / 100.0 if raw >= 0 else None
