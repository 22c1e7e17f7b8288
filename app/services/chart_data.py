from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

import yaml

from app import settings
from app.models.chart import ChartColumn
from app.services.isotype_series import circle_icon, glyph_icon, rect_icon
from app.services.tag_aggregator import slugify_tag

logger = logging.getLogger(__name__)

CHART_FILENAMES = ["charts.yaml", "charts.yml", "charts.json"]
DEFAULT_CHART_HEIGHT = 300
# leaves room for the axis labels under the plot
MIN_CHART_HEIGHT = 100

_ICONS: Dict[str, Callable] = {
    "rect": rect_icon,
    "circle": circle_icon,
}


@dataclass(slots=True)
class ChartDefinition:
    slug: str
    title: str
    height: int = DEFAULT_CHART_HEIGHT
    description: Optional[str] = None
    columns: List[ChartColumn] = field(default_factory=list)


_charts: Dict[str, ChartDefinition] = {}
_loaded = False


def resolve_icon(name) -> Optional[Callable]:
    """Map an icon spec (``rect``, ``circle`` or ``glyph:<text>``) to a renderer."""
    if not isinstance(name, str) or not name.strip():
        return None
    name = name.strip()
    if name.startswith("glyph:"):
        glyph = name[len("glyph:"):]
        return glyph_icon(glyph) if glyph else None
    icon = _ICONS.get(name.lower())
    if icon is None:
        logger.warning("Unknown chart icon '%s', falling back to default", name)
    return icon


def _read_charts_file(content_dir: Path) -> List[dict]:
    for name in CHART_FILENAMES:
        path = content_dir / name
        if path.exists():
            try:
                if path.suffix in {".yaml", ".yml"}:
                    with path.open("r", encoding="utf-8") as fp:
                        data = yaml.safe_load(fp) or {}
                else:
                    data = json.loads(path.read_text(encoding="utf-8"))
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning("Failed to load charts from %s: %s", path, exc)
                return []

            charts = data.get("charts", []) if isinstance(data, dict) else None
            if not isinstance(charts, list):
                logger.warning("charts file %s is not in expected format", path)
                return []
            return charts
    return []


def _parse_column(entry, default_icon: Optional[Callable]) -> Optional[ChartColumn]:
    if not isinstance(entry, dict):
        return None
    label = str(entry.get("label") or "").strip()
    count = entry.get("count")
    if not label or isinstance(count, bool) or not isinstance(count, int) or count < 0:
        logger.warning("Skipping chart column with invalid label/count: %r", entry)
        return None
    fill = entry.get("fill")
    if isinstance(fill, str):
        fill = fill.strip() or None
    else:
        fill = None
    icon = resolve_icon(entry.get("icon")) or default_icon
    return ChartColumn(label=label, count=count, fill=fill, icon=icon)


def parse_chart(entry: dict) -> Optional[ChartDefinition]:
    title = str(entry.get("title") or "").strip()
    # chart slugs become URL and output path segments
    slug = slugify_tag(str(entry.get("slug") or "").strip() or title)
    if not slug:
        return None
    height = entry.get("height")
    if not isinstance(height, int) or isinstance(height, bool) or height < MIN_CHART_HEIGHT:
        height = DEFAULT_CHART_HEIGHT
    description = entry.get("description")
    if isinstance(description, str):
        description = description.strip() or None
    default_icon = resolve_icon(entry.get("icon"))

    columns: List[ChartColumn] = []
    seen = set()
    for raw_column in entry.get("columns") or []:
        column = _parse_column(raw_column, default_icon)
        if column is None:
            continue
        if column.label in seen:
            logger.warning("Duplicate column '%s' in chart '%s' ignored", column.label, slug)
            continue
        seen.add(column.label)
        columns.append(column)
    return ChartDefinition(
        slug=slug, title=title or slug, height=height, description=description, columns=columns
    )


def _ensure_loaded() -> None:
    if not _loaded:
        refresh()


def refresh(content_dir: Optional[Path] = None) -> None:
    """Reload chart definitions (used on startup and before a static build)."""
    global _loaded, _charts
    mapping: Dict[str, ChartDefinition] = {}
    for entry in _read_charts_file(content_dir or settings.CONTENT_DIR):
        if not isinstance(entry, dict):
            continue
        chart = parse_chart(entry)
        if chart is None:
            continue
        mapping[chart.slug] = chart
    _charts = mapping
    _loaded = True


def list_charts() -> List[ChartDefinition]:
    _ensure_loaded()
    return list(_charts.values())


def get_chart(slug: str) -> Optional[ChartDefinition]:
    _ensure_loaded()
    return _charts.get(slug)
