from __future__ import annotations

import html
import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import frontmatter
from markdown_it import MarkdownIt
from mdit_py_plugins.tasklists import tasklists_plugin

from app import settings
from app.models.post import BlogPost


logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 140
# top-level paths owned by listing pages; a post slug may not shadow them
RESERVED_SLUGS = {"tags", "charts", "static", "health"}
# relative path segments would escape the output directory
UNSAFE_SLUGS = {".", ".."}

_markdown = MarkdownIt("commonmark", {"html": True}).enable("table").enable("strikethrough")
_markdown.use(tasklists_plugin)

_posts_index: Dict[str, BlogPost] = {}
_ordered_posts: List[BlogPost] = []


def load_posts(content_dir: Path) -> List[BlogPost]:
    """Load every published markdown post under ``content_dir``, newest first."""
    if not content_dir.exists():
        logger.warning("Content directory %s does not exist", content_dir)
        return []

    posts: List[BlogPost] = []
    seen_slugs: Dict[str, Path] = {}

    for path in sorted(content_dir.rglob("*.md")):
        try:
            post = _load_post(path)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Failed to load post %s: %s", path, exc)
            continue

        if post is None:
            continue

        if post.slug in RESERVED_SLUGS:
            logger.warning("Skipping %s: slug '%s' is reserved", path, post.slug)
            continue

        if post.slug in UNSAFE_SLUGS:
            logger.warning("Skipping %s: slug '%s' is not a valid path segment", path, post.slug)
            continue

        if post.slug in seen_slugs:
            logger.warning(
                "Skipping %s: slug '%s' already used by %s", path, post.slug, seen_slugs[post.slug]
            )
            continue
        seen_slugs[post.slug] = path
        posts.append(post)

    posts.sort(key=lambda item: item.date, reverse=True)
    return posts


def refresh_cache(content_dir: Optional[Path] = None) -> None:
    """Load all markdown posts into memory."""
    global _posts_index, _ordered_posts

    posts = load_posts(content_dir or settings.CONTENT_DIR)
    _ordered_posts = posts
    _posts_index = {post.slug: post for post in posts}
    logger.info("Loaded %d posts", len(posts))


def list_posts() -> List[BlogPost]:
    """Return posts sorted by date."""
    return list(_ordered_posts)


def get_post(slug: str) -> Optional[BlogPost]:
    return _posts_index.get(slug)


def _load_post(path: Path) -> Optional[BlogPost]:
    parsed = frontmatter.load(path)
    meta = parsed.metadata or {}
    content = parsed.content.strip()

    if not content:
        logger.warning("Skipping empty post: %s", path)
        return None

    # Skip draft posts
    if meta.get("draft") or meta.get("published") is False:
        return None

    title = str(meta.get("title") or _title_from_path(path))
    slug = str(meta.get("slug") or "").strip("/") or _slug_from_path(path)
    if "/" in slug:
        # nested paths cannot be routed as a single segment
        slug = _slugify(slug)

    timestamp = _parse_date(meta.get("date"))
    if timestamp is None:
        logger.warning("Post %s has no usable date, using file modification time", path)
        timestamp = _file_modified_at(path)
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone().replace(tzinfo=None)

    content_html = _markdown.render(content)
    description = _extract_description(meta)

    return BlogPost(
        slug=slug,
        title=title,
        date=timestamp,
        excerpt=_extract_excerpt(content_html),
        content_html=content_html,
        description=description,
        tags=_normalize_tags(meta.get("tags")),
    )


def _title_from_path(path: Path) -> str:
    stem = path.parent.name if path.stem == "index" else path.stem
    return stem.replace("-", " ").title()


def _slug_from_path(path: Path) -> str:
    # content/blog/hello-world/index.md is served as hello-world
    stem = path.parent.name if path.stem == "index" else path.stem
    return _slugify(stem)


def _parse_date(value) -> Optional[datetime]:
    if value is None:
        return None

    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())

    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value)

    if isinstance(value, str):
        text = value.strip()
        for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M:%S"):
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            logger.warning("Unrecognized date format '%s'", value)
            return None

    return None


def _file_modified_at(path: Path) -> datetime:
    stat = path.stat()
    return datetime.fromtimestamp(stat.st_mtime)


_slug_pattern = re.compile(r"[^a-z0-9]+")
_tag_pattern = re.compile(r"<[^>]+>")
_whitespace_pattern = re.compile(r"\s+")


def _slugify(value: str) -> str:
    normalized = value.strip().lower()
    normalized = _slug_pattern.sub("-", normalized)
    normalized = normalized.strip("-")
    return normalized or "post"


def _extract_description(meta: dict) -> Optional[str]:
    description = meta.get("description") or meta.get("summary")
    if isinstance(description, str) and description.strip():
        return description.strip()
    return None


def _extract_excerpt(content_html: str) -> str:
    plain = _tag_pattern.sub(" ", content_html)
    plain = _whitespace_pattern.sub(" ", html.unescape(plain)).strip()
    if len(plain) <= EXCERPT_LENGTH:
        return plain
    cut = plain[: EXCERPT_LENGTH - 1]
    if " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    return f"{cut.rstrip()}…"


def _normalize_tags(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, Iterable):
        tags: List[str] = []
        for item in value:
            if isinstance(item, str) and item.strip():
                tags.append(item.strip())
        return tags
    return []


try:
    refresh_cache()
except Exception as exc:  # pylint: disable=broad-except
    logger.warning("Initial markdown load failed: %s", exc)
