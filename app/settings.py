from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
CONTENT_DIR = Path(os.getenv("BLOG_CONTENT_DIR", str(BASE_DIR / "content"))).expanduser()
OUTPUT_DIR = Path(os.getenv("BLOG_OUTPUT_DIR", str(BASE_DIR / "site"))).expanduser()
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"
LOG_LEVEL = os.getenv("BLOG_LOG_LEVEL", "INFO").upper()

SITE_FILENAMES = ["site.yaml", "site.yml", "site.json"]


@dataclass(slots=True)
class SiteMetadata:
    title: str = "Aaron Moat"
    author: str = "Aaron Moat"
    description: str = "Aaron Moat's blog"
    site_url: str = "https://aaronmoat.com"


_site: Optional[SiteMetadata] = None


def _read_site_file(content_dir: Path) -> dict:
    for name in SITE_FILENAMES:
        path = content_dir / name
        if not path.exists():
            continue
        try:
            if path.suffix in {".yaml", ".yml"}:
                with path.open("r", encoding="utf-8") as fp:
                    data = yaml.safe_load(fp) or {}
            else:
                data = json.loads(path.read_text(encoding="utf-8"))
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Failed to load site metadata from %s: %s", path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("site metadata file %s is not in expected format", path)
            return {}
        return data
    return {}


def load_site_metadata(content_dir: Optional[Path] = None) -> SiteMetadata:
    """Read site metadata, falling back to defaults for missing keys."""
    data = _read_site_file(content_dir or CONTENT_DIR)
    defaults = SiteMetadata()
    values = {}
    for key in ("title", "author", "description", "site_url"):
        raw = data.get(key)
        if isinstance(raw, str) and raw.strip():
            values[key] = raw.strip()
        else:
            values[key] = getattr(defaults, key)
    return SiteMetadata(**values)


def get_site_metadata() -> SiteMetadata:
    global _site
    if _site is None:
        _site = load_site_metadata()
    return _site


def refresh(content_dir: Optional[Path] = None) -> None:
    """Reload site metadata (used on startup and before a static build)."""
    global _site
    _site = load_site_metadata(content_dir)
