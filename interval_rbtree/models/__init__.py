from dataclasses import dataclass
from enum import Enum

# MARK: - Constants

U64_MAX = 0xFFFF_FFFF_FFFF_FFFF


# MARK: - Errors


class InvalidIntervalError(ValueError):
    """Raised when interval endpoints are not ``0 <= low <= high <= U64_MAX``."""


# MARK: - Enums


class Color(Enum):
    RED = "red"
    BLACK = "black"


# MARK: - Models


@dataclass(frozen=True, order=True, slots=True)
class Interval:
    """Closed interval ``[low, high]`` over unsigned 64-bit endpoints.

    Ordering is lexicographic on ``(low, high)`` which gives every interval,
    including points such as ``(7, 7)``, a single position in the tree.
    """

    low: int
    high: int

    def __post_init__(self) -> None:
        for name in ("low", "high"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidIntervalError(
                    f"Interval {name} must be an integer, got {type(value).__name__}"
                )
            if value < 0 or value > U64_MAX:
                raise InvalidIntervalError(
                    f"Interval {name} {value} is outside the unsigned 64-bit range"
                )
        if self.low > self.high:
            raise InvalidIntervalError(
                f"Interval low {self.low} must not exceed high {self.high}"
            )

    @classmethod
    def point(cls, value: int) -> "Interval":
        return cls(value, value)

    def overlaps(self, other: "Interval") -> bool:
        return self.low <= other.high and other.low <= self.high

    def contains_point(self, value: int) -> bool:
        return self.low <= value <= self.high

    def __str__(self) -> str:
        return f"[{self.low}, {self.high}]"


__all__ = ["U64_MAX", "InvalidIntervalError", "Color", "Interval"]
