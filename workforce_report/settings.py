"""Business constants and run options for the reconciliation engine."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Mapping, Tuple, Union

SIMILARITY_THRESHOLD = 0.7
SIMILARITY_MIN_LENGTH = 5
IDEAL_SOCIAL_WORKER_RATIO = 1 / 17
SERVICE_RATIO_TARGET = 15.0
MIN_TENURE_YEARS = 3
SCORE_WEIGHTS = {
    "fill_rate": 0.30,
    "balance": 0.20,
    "stability": 0.20,
    "expertise": 0.15,
    "service": 0.15,
}
ALLOCATION_BASES = ("course", "budget")

WeightPairs = Tuple[Tuple[str, float], ...]


@dataclass(frozen=True)
class Settings:
    """Run options; hashable, so weights are held as ``(name, weight)`` pairs.

    A mapping passed as ``weights`` is converted to pairs on construction.
    """

    similarity_threshold: float = SIMILARITY_THRESHOLD
    similarity_min_length: int = SIMILARITY_MIN_LENGTH
    ideal_ratio: float = IDEAL_SOCIAL_WORKER_RATIO
    service_target: float = SERVICE_RATIO_TARGET
    min_tenure_years: int = MIN_TENURE_YEARS
    weights: Union[WeightPairs, Mapping[str, float]] = tuple(SCORE_WEIGHTS.items())
    allocation_basis: str = "course"
    require_secondary_id: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.weights, Mapping):
            object.__setattr__(self, "weights", tuple(self.weights.items()))
        if self.allocation_basis not in ALLOCATION_BASES:
            raise ValueError(f"Unknown allocation basis: {self.allocation_basis}")
        names = [name for name, _ in self.weights]
        if len(names) != len(set(names)) or set(names) != set(SCORE_WEIGHTS):
            raise ValueError(f"Weights must cover exactly: {sorted(SCORE_WEIGHTS)}")

    def weight(self, name: str) -> float:
        return dict(self.weights)[name]

    def with_overrides(self, **changes) -> "Settings":
        """Return a copy with the non-``None`` keyword values applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


DEFAULT_SETTINGS = Settings()
