"""Geometry for isotype charts.

An isotype chart draws one icon per unit of a category's count. Categories
share the x axis as equal-width bands; counts stack upward from a zero-based
value axis. Coordinates follow SVG conventions, so the baseline sits at
``plot_height`` and smaller ``y`` values are higher up.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from app.models.chart import ChartColumn, ChartLayout, ChartPoint, HitRegion

logger = logging.getLogger(__name__)

DEFAULT_SCALE_FACTOR = 0.85


class BandScale:
    """Ordinal scale mapping each category to an equal-width band."""

    def __init__(self, domain: Sequence[str], range_width: float) -> None:
        self.domain = list(domain)
        self.bandwidth = range_width / len(self.domain) if self.domain else 0.0
        self._index = {value: position for position, value in enumerate(self.domain)}

    def start(self, value: str) -> float:
        return self._index[value] * self.bandwidth

    def center(self, value: str) -> float:
        return self.start(value) + self.bandwidth / 2


class LinearScale:
    """Zero-based linear value scale from ``[0, domain_max]`` to ``[range_start, range_end]``."""

    def __init__(self, domain_max: float, range_start: float, range_end: float) -> None:
        # a flat domain would divide by zero; treat it as one unit tall
        self.domain_max = domain_max if domain_max > 0 else 1
        self.range_start = range_start
        self.range_end = range_end

    def __call__(self, value: float) -> float:
        span = self.range_end - self.range_start
        return self.range_start + span * (value / self.domain_max)

    def distance(self, units: float = 1) -> float:
        return abs(self(units) - self(0))


def _validate(columns: Sequence[ChartColumn], plot_width: float, plot_height: float, scale_factor: float) -> None:
    if plot_width <= 0 or plot_height <= 0:
        raise ValueError("Plot dimensions must be positive.")
    if not 0 < scale_factor <= 1:
        raise ValueError("Scale factor must be within (0, 1].")
    seen = set()
    for column in columns:
        if isinstance(column.count, bool) or not isinstance(column.count, int) or column.count < 0:
            raise ValueError(f"Column {column.label!r} needs a non-negative integer count.")
        if column.label in seen:
            raise ValueError(f"Duplicate column label {column.label!r}.")
        seen.add(column.label)


def compute_layout(
    columns: Sequence[ChartColumn],
    plot_width: float,
    plot_height: float,
    scale_factor: float = DEFAULT_SCALE_FACTOR,
) -> ChartLayout:
    """Place one square icon per unit of each column's count.

    Icons are sized to the smaller of the band width and the height of one
    value unit, shrunk by ``scale_factor``, so neighbouring columns and
    stacked icons never overlap. Points come out in column order, bottom to
    top. Each column also gets a full-height hit region covering its band.
    """
    _validate(columns, plot_width, plot_height, scale_factor)
    if not columns:
        return ChartLayout()

    x_scale = BandScale([column.label for column in columns], plot_width)
    y_scale = LinearScale(max(column.count for column in columns), plot_height, 0)

    width_per_category = x_scale.bandwidth
    height_per_unit = y_scale.distance(1)
    size = min(width_per_category, height_per_unit) * scale_factor

    points: List[ChartPoint] = []
    hit_regions: List[HitRegion] = []
    for column in columns:
        left = x_scale.center(column.label) - size / 2
        for index in range(1, column.count + 1):
            points.append(
                ChartPoint(
                    label=column.label,
                    index=index,
                    x=left,
                    y=y_scale(index),
                    size=size,
                    fill=column.fill,
                    icon=column.icon,
                )
            )
        hit_regions.append(
            HitRegion(
                column=column,
                x=x_scale.start(column.label),
                y=0.0,
                width=width_per_category,
                height=plot_height,
            )
        )

    logger.debug(
        "Laid out %d icons across %d columns (icon size %.2f)", len(points), len(columns), size
    )
    return ChartLayout(
        width_per_category=width_per_category,
        height_per_unit=height_per_unit,
        icon_size=size,
        points=points,
        hit_regions=hit_regions,
    )
