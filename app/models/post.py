from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True, slots=True)
class BlogPost:
    slug: str
    title: str
    date: datetime
    excerpt: str
    content_html: str = ""
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    @property
    def display_date(self) -> str:
        return self.date.strftime("%B %d, %Y")

    @property
    def listing_title(self) -> str:
        return self.title or self.slug

    @property
    def listing_summary(self) -> str:
        return self.description or self.excerpt


@dataclass(frozen=True, slots=True)
class TagGroup:
    tag: str
    count: int = 0

    @property
    def slug(self) -> str:
        from app.services.tag_aggregator import slugify_tag

        return slugify_tag(self.tag)
