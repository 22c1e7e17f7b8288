from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app import settings
from app.services import chart_data, markdown_loader, tag_aggregator
from app.services.isotype_series import render_chart_svg


router = APIRouter()
templates = Jinja2Templates(directory=str(settings.TEMPLATES_DIR))
templates.env.globals["slugify_tag"] = tag_aggregator.slugify_tag


def chart_context(
    chart: chart_data.ChartDefinition, active: Optional[str], base_href: Optional[str] = None
) -> dict:
    """Template context for a chart page; hit regions link back with ``?active=``."""

    def region_href(column) -> str:
        return f"{base_href}?active={quote(column.label)}"

    svg = render_chart_svg(
        chart.columns,
        height=chart.height,
        title=chart.title,
        active=active,
        region_href=region_href if base_href else None,
    )
    return {"chart": chart, "chart_svg": svg, "active": active}


@router.get("/", response_class=HTMLResponse, name="homepage")
def homepage(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "site": settings.get_site_metadata(),
            "posts": markdown_loader.list_posts(),
        },
    )


@router.get("/tags/", response_class=HTMLResponse, name="tags_index")
def tags_index(request: Request) -> HTMLResponse:
    groups = tag_aggregator.group_tags(markdown_loader.list_posts())
    return templates.TemplateResponse(
        request,
        "tags.html",
        {
            "site": settings.get_site_metadata(),
            "groups": groups,
        },
    )


@router.get("/tags/{tag_slug}/", response_class=HTMLResponse, name="tag_posts")
def tag_posts(request: Request, tag_slug: str) -> HTMLResponse:
    posts = markdown_loader.list_posts()
    group = tag_aggregator.resolve_tag_slug(tag_aggregator.group_tags(posts), tag_slug)
    if group is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    tagged = tag_aggregator.filter_by_tag(posts, group.tag)
    return templates.TemplateResponse(
        request,
        "tag.html",
        {
            "site": settings.get_site_metadata(),
            "tag": group.tag,
            "header": tag_aggregator.tag_header(len(tagged), group.tag),
            "posts": tagged,
        },
    )


@router.get("/charts/{chart_slug}/", response_class=HTMLResponse, name="chart_detail")
def chart_detail(
    request: Request, chart_slug: str, active: Optional[str] = Query(None)
) -> HTMLResponse:
    chart = chart_data.get_chart(chart_slug)
    if chart is None:
        raise HTTPException(status_code=404, detail="Chart not found")
    context = chart_context(chart, active, str(request.url_for("chart_detail", chart_slug=chart_slug)))
    context["site"] = settings.get_site_metadata()
    return templates.TemplateResponse(request, "chart.html", context)


@router.get("/{slug}/", response_class=HTMLResponse, name="post_detail")
def post_detail(request: Request, slug: str) -> HTMLResponse:
    post = markdown_loader.get_post(slug)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return templates.TemplateResponse(
        request,
        "post_detail.html",
        {
            "site": settings.get_site_metadata(),
            "post": post,
        },
    )
