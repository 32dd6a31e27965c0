import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Observation:
    """Single yield measurement for one entity, year, and crop."""

    entity: str
    year: int
    crop: str
    yield_value: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.yield_value):
            raise ValueError(f"Yield for {self.entity}/{self.crop}/{self.year} must be finite.")
        if self.yield_value < 0:
            raise ValueError(f"Yield for {self.entity}/{self.crop}/{self.year} cannot be negative.")

    @property
    def key(self) -> tuple[str, str]:
        return (self.entity, self.crop)
