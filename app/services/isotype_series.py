from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Sequence

from markupsafe import Markup

from app.models.chart import ChartColumn, ChartLayout, HitRegion
from app.services.isotype_layout import DEFAULT_SCALE_FACTOR, compute_layout

DEFAULT_FILL = "rgb(18, 147, 154)"
HIGHLIGHT_FILL = "#fcba03"

ColumnHandler = Callable[[ChartColumn], None]


@dataclass(slots=True)
class IconAttrs:
    x: float
    y: float
    width: float
    height: float
    style: Dict[str, str] = field(default_factory=dict)

    @property
    def fill(self) -> str:
        return self.style.get("fill", DEFAULT_FILL)


def _fmt(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _style_attr(style: Dict[str, str]) -> str:
    return "; ".join(f"{key}: {value}" for key, value in style.items())


def rect_icon(attrs: IconAttrs) -> str:
    return Markup(
        '<rect x="{}" y="{}" width="{}" height="{}" style="{}" />'
    ).format(_fmt(attrs.x), _fmt(attrs.y), _fmt(attrs.width), _fmt(attrs.height), _style_attr(attrs.style))


def circle_icon(attrs: IconAttrs) -> str:
    radius = min(attrs.width, attrs.height) / 2
    return Markup('<circle cx="{}" cy="{}" r="{}" style="{}" />').format(
        _fmt(attrs.x + attrs.width / 2),
        _fmt(attrs.y + attrs.height / 2),
        _fmt(radius),
        _style_attr(attrs.style),
    )


def glyph_icon(glyph: str) -> Callable[[IconAttrs], str]:
    """Icon renderer drawing ``glyph`` as text filling the icon square."""

    def render(attrs: IconAttrs) -> str:
        return Markup(
            '<text x="{}" y="{}" font-size="{}" text-anchor="middle" '
            'dominant-baseline="central" fill="{}">{}</text>'
        ).format(
            _fmt(attrs.x + attrs.width / 2),
            _fmt(attrs.y + attrs.height / 2),
            _fmt(attrs.height),
            attrs.fill,
            glyph,
        )

    return render


def highlight_column(
    columns: Sequence[ChartColumn], active: Optional[str], fill: str = HIGHLIGHT_FILL
) -> List[ChartColumn]:
    """Copy of ``columns`` with the ``active`` column recoloured."""
    return [replace(column, fill=fill) if column.label == active else column for column in columns]


class IsotypeSeries:
    """Renders an isotype layout as SVG and tracks pointer hover per column.

    ``width`` and ``height`` are the outer chart size; the plot area is what
    remains after the margins. Pointer coordinates are given in outer chart
    coordinates.
    """

    def __init__(
        self,
        columns: Sequence[ChartColumn],
        width: float,
        height: float,
        *,
        margin_left: float = 0,
        margin_top: float = 0,
        margin_right: float = 0,
        margin_bottom: float = 0,
        scale_factor: float = DEFAULT_SCALE_FACTOR,
        style: Optional[Dict[str, str]] = None,
        on_value_mouse_over: Optional[ColumnHandler] = None,
        on_value_mouse_out: Optional[ColumnHandler] = None,
    ) -> None:
        self.columns = list(columns)
        self.margin_left = margin_left
        self.margin_top = margin_top
        self.plot_width = width - margin_left - margin_right
        self.plot_height = height - margin_top - margin_bottom
        self.style = dict(style or {})
        self.on_value_mouse_over = on_value_mouse_over
        self.on_value_mouse_out = on_value_mouse_out
        self.layout: ChartLayout = compute_layout(
            self.columns, self.plot_width, self.plot_height, scale_factor
        )
        self._hovered: Optional[HitRegion] = None

    @property
    def hovered(self) -> Optional[ChartColumn]:
        return self._hovered.column if self._hovered else None

    def hit_test(self, x: float, y: float) -> Optional[HitRegion]:
        local_x = x - self.margin_left
        local_y = y - self.margin_top
        for region in self.layout.hit_regions:
            if region.contains(local_x, local_y):
                return region
        return None

    def pointer_move(self, x: float, y: float) -> Optional[ChartColumn]:
        """Update hover state, firing out/over events when the column changes."""
        region = self.hit_test(x, y)
        if region is self._hovered:
            return self.hovered
        self.pointer_leave()
        if region is not None:
            self._hovered = region
            if self.on_value_mouse_over:
                self.on_value_mouse_over(region.column)
        return self.hovered

    def pointer_leave(self) -> None:
        previous, self._hovered = self._hovered, None
        if previous is not None and self.on_value_mouse_out:
            self.on_value_mouse_out(previous.column)

    def render(self, region_href: Optional[Callable[[ChartColumn], str]] = None) -> Markup:
        parts: List[str] = [
            Markup('<g transform="translate({},{})">').format(_fmt(self.margin_left), _fmt(self.margin_top))
        ]
        for region in self.layout.hit_regions:
            column = region.column
            parts.append(Markup('<g class="isotype-column" data-label="{}">').format(column.label))
            hit_rect = Markup(
                '<rect class="isotype-hit-region" x="{}" y="{}" width="{}" height="{}" fill="transparent" />'
            ).format(_fmt(region.x), _fmt(region.y), _fmt(region.width), _fmt(region.height))
            if region_href is not None:
                hit_rect = Markup('<a href="{}">{}</a>').format(region_href(column), hit_rect)
            parts.append(hit_rect)
            for point in self.layout.points_for(column.label):
                attrs = IconAttrs(
                    x=point.x,
                    y=point.y,
                    width=point.size,
                    height=point.size,
                    style={"fill": point.fill or DEFAULT_FILL, **self.style},
                )
                renderer = point.icon or rect_icon
                parts.append(Markup(renderer(attrs)))
            parts.append(Markup("</g>"))
        parts.append(Markup("</g>"))
        return Markup("").join(parts)


def render_chart_svg(
    columns: Sequence[ChartColumn],
    width: float = 600,
    height: float = 300,
    *,
    title: Optional[str] = None,
    active: Optional[str] = None,
    region_href: Optional[Callable[[ChartColumn], str]] = None,
    scale_factor: float = DEFAULT_SCALE_FACTOR,
) -> Markup:
    """Full ``<svg>`` document: the series plus a baseline and category labels."""
    margin = {"left": 40, "right": 10, "top": 10, "bottom": 40}
    series = IsotypeSeries(
        highlight_column(columns, active),
        width,
        height,
        margin_left=margin["left"],
        margin_top=margin["top"],
        margin_right=margin["right"],
        margin_bottom=margin["bottom"],
        scale_factor=scale_factor,
    )
    baseline = margin["top"] + series.plot_height
    parts: List[str] = [
        Markup(
            '<svg xmlns="http://www.w3.org/2000/svg" class="isotype-chart" width="{}" height="{}" '
            'viewBox="0 0 {} {}" role="img">'
        ).format(_fmt(width), _fmt(height), _fmt(width), _fmt(height))
    ]
    if title:
        parts.append(Markup("<title>{}</title>").format(title))
    parts.append(
        Markup('<line class="isotype-axis" x1="{}" y1="{}" x2="{}" y2="{}" stroke="#6b6b76" />').format(
            _fmt(margin["left"]), _fmt(baseline), _fmt(margin["left"] + series.plot_width), _fmt(baseline)
        )
    )
    for region in series.layout.hit_regions:
        parts.append(
            Markup('<text class="isotype-label" x="{}" y="{}" text-anchor="middle">{} ({})</text>').format(
                _fmt(margin["left"] + region.x + region.width / 2),
                _fmt(baseline + 20),
                region.column.label,
                region.column.count,
            )
        )
    parts.append(series.render(region_href))
    parts.append(Markup("</svg>"))
    return Markup("").join(parts)
