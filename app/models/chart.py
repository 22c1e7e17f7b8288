from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional


@dataclass(frozen=True, slots=True)
class ChartColumn:
    label: str
    count: int
    fill: Optional[str] = None
    icon: Optional[Callable[..., str]] = None


@dataclass(frozen=True, slots=True)
class ChartPoint:
    label: str
    index: int
    x: float
    y: float
    size: float
    fill: Optional[str] = None
    icon: Optional[Callable[..., str]] = None


@dataclass(frozen=True, slots=True)
class HitRegion:
    """Invisible rectangle over a column's band, used for hover detection."""

    column: ChartColumn
    x: float
    y: float
    width: float
    height: float

    @property
    def label(self) -> str:
        return self.column.label

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y <= self.y + self.height


@dataclass(slots=True)
class ChartLayout:
    width_per_category: float = 0.0
    height_per_unit: float = 0.0
    icon_size: float = 0.0
    points: List[ChartPoint] = field(default_factory=list)
    hit_regions: List[HitRegion] = field(default_factory=list)

    def __iter__(self) -> Iterator[ChartPoint]:
        return iter(self.points)

    def __len__(self) -> int:
        return len(self.points)

    def points_for(self, label: str) -> List[ChartPoint]:
        return [point for point in self.points if point.label == label]
