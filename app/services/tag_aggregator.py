from __future__ import annotations

import unicodedata
from collections import Counter
from typing import Dict, Iterable, List, Optional

from app.models.post import BlogPost, TagGroup


def group_tags(posts: Iterable[BlogPost]) -> List[TagGroup]:
    """Count tags across posts, most frequent first.

    Every occurrence counts, so the group totals always add up to the number
    of tags carried by all posts. Equal counts are ordered alphabetically by
    the raw tag so repeated builds produce the same listing.
    """
    counts: Counter = Counter()
    for post in posts:
        for tag in post.tags:
            counts[tag] += 1
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [TagGroup(tag=tag, count=count) for tag, count in ordered]


def filter_by_tag(posts: Iterable[BlogPost], tag: str) -> List[BlogPost]:
    """Posts carrying exactly ``tag``, newest first."""
    matching = [post for post in posts if tag in post.tags]
    matching.sort(key=lambda post: post.date, reverse=True)
    return matching


def slugify_tag(tag: str) -> str:
    """Kebab-case a tag for use in ``/tags/<slug>/`` URLs.

    Accents are stripped from Latin letters (other scripts keep their
    combining marks), then words are split on punctuation, whitespace,
    case changes (``fooBar``, ``XMLHttp``) and letter/digit boundaries:

    >>> slugify_tag("Machine Learning")
    'machine-learning'
    >>> slugify_tag("ReactJS")
    'react-js'
    >>> slugify_tag("html5")
    'html-5'

    Published tag pages depend on this mapping, so it must not change.
    Distinct tags may produce the same slug; see ``find_slug_collisions``.
    """
    words: List[str] = []
    for run in _word_runs(_deburr(tag)):
        words.extend(_split_run(run))
    # lowercasing can reintroduce combining marks ("İ" -> "i̇")
    return _deburr("-".join(word.lower() for word in words))


def _deburr(value: str) -> str:
    # accents are dropped from Latin letters only; other scripts keep their marks
    kept: List[str] = []
    for char in unicodedata.normalize("NFKD", value):
        if unicodedata.combining(char) and kept and kept[-1] < "\u0250":
            continue
        kept.append(char)
    return unicodedata.normalize("NFC", "".join(kept))


def _is_mark(char: str) -> bool:
    return unicodedata.category(char).startswith("M")


def _word_runs(value: str) -> List[str]:
    """Alphanumeric runs, keeping combining marks with the letter they follow."""
    runs: List[str] = []
    current: List[str] = []
    for char in value:
        if char.isalnum() or (current and _is_mark(char)):
            current.append(char)
        elif current:
            runs.append("".join(current))
            current = []
    if current:
        runs.append("".join(current))
    return runs


def _char_kind(char: str) -> str:
    if char.isdigit():
        return "digit"
    if char.isupper():
        return "upper"
    return "lower"


def _split_run(run: str) -> List[str]:
    kinds: List[str] = []
    for char in run:
        # a vowel sign or virama belongs to its base letter
        kinds.append(kinds[-1] if kinds and _is_mark(char) else _char_kind(char))
    words: List[str] = []
    start = 0
    for index in range(1, len(run)):
        previous = kinds[index - 1]
        current = kinds[index]
        if _is_mark(run[index]):
            boundary = False
        elif (previous == "digit") != (current == "digit"):
            boundary = True
        elif previous == "lower" and current == "upper":
            boundary = True
        elif (
            previous == "upper"
            and current == "upper"
            and index + 1 < len(run)
            and kinds[index + 1] == "lower"
        ):
            # end of an acronym: "XMLHttp" splits before the "H"
            boundary = True
        else:
            boundary = False
        if boundary:
            words.append(run[start:index])
            start = index
    words.append(run[start:])
    return words


def find_slug_collisions(groups: Iterable[TagGroup]) -> Dict[str, List[str]]:
    """Slugs shared by more than one distinct tag, mapped to those tags."""
    by_slug: Dict[str, List[str]] = {}
    for group in groups:
        by_slug.setdefault(group.slug, []).append(group.tag)
    return {slug: tags for slug, tags in by_slug.items() if len(tags) > 1}


def resolve_tag_slug(groups: Iterable[TagGroup], slug: str) -> Optional[TagGroup]:
    """First group (in the order given) whose tag slugifies to ``slug``."""
    for group in groups:
        if group.slug == slug:
            return group
    return None


def tag_header(count: int, tag: str) -> str:
    return f'{count} post{"" if count == 1 else "s"} tagged with "{tag}"'
