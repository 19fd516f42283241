"""Engine configuration knobs."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Dict


RELAXATION_MODES = ("fixed", "converge")


@dataclass
class EngineConfig:
    """Tunable constants for ratings, ranking and pod assembly.

    Defaults reproduce the historical outputs; changing ``relaxation_rounds``
    or ``relaxation_mode`` changes adjusted ratings for every team.
    """

    # Adjusted efficiency relaxation
    relaxation_rounds: int = 5
    relaxation_mode: str = "fixed"
    convergence_tolerance: float = 1e-6
    max_convergence_rounds: int = 200
    home_court_advantage: float = 3.5
    damping_factor: float = 0.4

    # Possession estimate: FGA - OREB + TO + k * FTA
    ft_coefficient: float = 0.475
    # Team splits use a different coefficient for nominally the same quantity.
    split_ft_coefficient: float = 0.44

    # RPI blend
    rpi_win_pct_weight: float = 0.30
    rpi_owp_weight: float = 0.50
    rpi_oowp_weight: float = 0.20
    sos_owp_weight: float = 0.67
    sos_oowp_weight: float = 0.33

    # Quadrant win points (Q1..Q4)
    quadrant_weights: Dict[int, float] = field(
        default_factory=lambda: {1: 4.0, 2: 2.0, 3: 1.0, 4: 0.5}
    )

    # Field and pods
    field_size: int = 64
    pod_count: int = 16
    pod_capacity: int = 3
    earth_radius_miles: float = 3959.0

    def __post_init__(self):
        if self.relaxation_mode not in RELAXATION_MODES:
            raise ValueError(f"relaxation_mode must be one of {RELAXATION_MODES}, got {self.relaxation_mode}")
        if self.relaxation_rounds < 0:
            raise ValueError("relaxation_rounds must be >= 0")
        if self.field_size < 1:
            raise ValueError("field_size must be positive")
        if self.pod_count < 1 or self.pod_capacity < 0:
            raise ValueError("pod_count must be positive and pod_capacity non-negative")

        # JSON object keys arrive as strings
        self.quadrant_weights = {int(q): float(w) for q, w in self.quadrant_weights.items()}
        missing = {1, 2, 3, 4} - set(self.quadrant_weights)
        if missing:
            raise ValueError(f"quadrant_weights missing quadrants: {sorted(missing)}")

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "EngineConfig":
        """Build a config from a (possibly partial) dictionary; unknown keys are rejected."""
        if not isinstance(data, dict):
            raise ValueError(f"Engine config must be a JSON object, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(map(str, set(data) - known))
        if unknown:
            raise ValueError(f"Unknown engine config keys: {', '.join(unknown)}")
        return cls(**data)
