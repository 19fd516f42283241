"""Team model for league ratings and bracket projection."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Team:
    """A member (or non-member) program for one season."""

    team_id: str
    name: str = ""
    conference: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    eligible: bool = True

    def __post_init__(self):
        """Validate team data."""
        if not self.team_id:
            raise ValueError("Team must have a non-empty team_id")

        if (self.latitude is None) != (self.longitude is None):
            raise ValueError(
                f"Team {self.team_id}: latitude and longitude must both be set or both be empty"
            )

        if self.latitude is not None:
            if not -90.0 <= self.latitude <= 90.0:
                raise ValueError(f"Team {self.team_id}: invalid latitude {self.latitude}")
            if not -180.0 <= self.longitude <= 180.0:
                raise ValueError(f"Team {self.team_id}: invalid longitude {self.longitude}")

        if not self.name:
            self.name = self.team_id

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def shares_conference(self, other: "Team") -> bool:
        """True when both teams carry the same non-empty conference label."""
        return bool(self.conference) and self.conference == other.conference

    def to_dict(self) -> dict:
        """Convert team to dictionary."""
        return {
            "team_id": self.team_id,
            "name": self.name,
            "conference": self.conference,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "eligible": self.eligible,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Team":
        """Create team from dictionary."""
        latitude = data.get("latitude")
        longitude = data.get("longitude")
        return cls(
            team_id=str(data["team_id"]),
            name=data.get("name", ""),
            conference=data.get("conference") or "",
            latitude=float(latitude) if latitude is not None else None,
            longitude=float(longitude) if longitude is not None else None,
            eligible=bool(data.get("eligible", True)),
        )
