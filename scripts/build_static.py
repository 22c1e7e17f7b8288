from __future__ import annotations

import argparse
import logging
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict

from jinja2 import Environment, FileSystemLoader, select_autoescape

BASE_DIR = Path(__file__).resolve().parent.parent

sys.path.insert(0, str(BASE_DIR))

from app import settings  # noqa: E402
from app.routers.pages import chart_context  # noqa: E402
from app.services import chart_data, markdown_loader, tag_aggregator  # noqa: E402

logger = logging.getLogger("build_static")


@dataclass
class StaticRequest:
    url_builder: Callable[[str, Dict[str, str]], str]

    def url_for(self, name: str, **params: str) -> str:
        return self.url_builder(name, params)


def build_url_factory(base_url: str) -> Callable[[str, Dict[str, str]], str]:
    base = "/" if not base_url else f"/{base_url.strip('/')}/"

    def builder(name: str, params: Dict[str, str]) -> str:
        if name == "homepage":
            path = ""
        elif name == "tags_index":
            path = "tags/"
        elif name == "tag_posts":
            path = f"tags/{params['tag_slug']}/"
        elif name == "chart_detail":
            path = f"charts/{params['chart_slug']}/"
        elif name == "post_detail":
            path = f"{params['slug']}/"
        elif name == "static":
            static_path = params.get("path", "")
            if static_path.startswith("/"):
                static_path = static_path[1:]
            path = f"static/{static_path}"
        else:
            path = ""
        return f"{base}{path}"

    return builder


def prepare_environment(url_builder: Callable[[str, Dict[str, str]], str]) -> Environment:
    env = Environment(
        loader=FileSystemLoader(settings.TEMPLATES_DIR),
        autoescape=select_autoescape(["html"]),
    )
    env.globals["url_for"] = lambda name, **params: url_builder(name, params)
    env.globals["slugify_tag"] = tag_aggregator.slugify_tag
    return env


def ensure_output_dir(output: Path) -> None:
    if output.exists():
        shutil.rmtree(output)
    output.mkdir(parents=True, exist_ok=True)
    shutil.copytree(settings.STATIC_DIR, output / "static", dirs_exist_ok=True)
    (output / ".nojekyll").write_text("", encoding="utf-8")


def render_template(env: Environment, template_name: str, destination: Path, context: Dict) -> None:
    template = env.get_template(template_name)
    html = template.render(context)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(html, encoding="utf-8")


def build_site(output_dir: Path, base_url: str, content_dir: Path | None = None) -> None:
    settings.refresh(content_dir)
    markdown_loader.refresh_cache(content_dir)
    chart_data.refresh(content_dir)
    url_builder = build_url_factory(base_url)
    env = prepare_environment(url_builder)

    request = StaticRequest(url_builder)
    site = settings.get_site_metadata()

    ensure_output_dir(output_dir)

    posts = markdown_loader.list_posts()
    groups = tag_aggregator.group_tags(posts)

    render_template(
        env,
        "index.html",
        output_dir / "index.html",
        {"request": request, "site": site, "posts": posts},
    )
    render_template(
        env,
        "tags.html",
        output_dir / "tags" / "index.html",
        {"request": request, "site": site, "groups": groups},
    )

    for slug, tags in tag_aggregator.find_slug_collisions(groups).items():
        logger.warning("Tags %s share the slug '%s'; only '%s' gets a page", tags, slug, tags[0])

    written_slugs = set()
    for group in groups:
        if not group.slug:
            logger.warning("Tag '%s' has no URL-safe characters, skipping its page", group.tag)
            continue
        if group.slug in written_slugs:
            continue
        written_slugs.add(group.slug)
        tagged = tag_aggregator.filter_by_tag(posts, group.tag)
        render_template(
            env,
            "tag.html",
            output_dir / "tags" / group.slug / "index.html",
            {
                "request": request,
                "site": site,
                "tag": group.tag,
                "header": tag_aggregator.tag_header(len(tagged), group.tag),
                "posts": tagged,
            },
        )

    for chart in chart_data.list_charts():
        context = chart_context(chart, active=None)
        context.update({"request": request, "site": site})
        render_template(env, "chart.html", output_dir / "charts" / chart.slug / "index.html", context)

    for post in posts:
        render_template(
            env,
            "post_detail.html",
            output_dir / post.slug / "index.html",
            {"request": request, "site": site, "post": post},
        )

    logger.info(
        "Built %d posts, %d tag pages and %d charts into %s",
        len(posts),
        len(written_slugs),
        len(chart_data.list_charts()),
        output_dir,
    )


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build a static HTML snapshot of the blog.")
    parser.add_argument("--output", type=Path, default=settings.OUTPUT_DIR, help="Output directory (default: ./site)")
    parser.add_argument("--base-url", type=str, default="", help="Sub-path the site is served under, if any.")
    parser.add_argument("--content", type=Path, default=None, help="Content directory (default: ./content)")
    return parser.parse_args()


def main() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    args = parse_args()
    content_dir = args.content.resolve() if args.content else None
    build_site(args.output.resolve(), args.base_url, content_dir)


if __name__ == "__main__":
    main()
