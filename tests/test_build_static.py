import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "scripts"))

import build_static  # noqa: E402

from app import settings  # noqa: E402
from app.services import chart_data, markdown_loader  # noqa: E402


def write_content(content_dir: Path) -> None:
    (content_dir / "blog").mkdir(parents=True)
    (content_dir / "blog" / "one.md").write_text(
        "---\ntitle: One\ndate: 2020-01-01\ntags: [Machine Learning, machine-learning, '+++']\n---\n\nFirst.\n",
        encoding="utf-8",
    )
    (content_dir / "blog" / "two.md").write_text(
        "---\ntitle: Two\ndate: 2020-02-01\ntags: [Machine Learning]\n---\n\nSecond.\n",
        encoding="utf-8",
    )
    (content_dir / "charts.yaml").write_text(
        "charts:\n  - slug: demo\n    title: Demo\n    columns:\n      - {label: A, count: 2}\n",
        encoding="utf-8",
    )
    (content_dir / "site.yaml").write_text("title: Test Blog\n", encoding="utf-8")


def test_build_site_writes_pages(tmp_path, caplog):
    content_dir = tmp_path / "content"
    output_dir = tmp_path / "site"
    write_content(content_dir)
    try:
        build_static.build_site(output_dir, "blog", content_dir)
    finally:
        settings.refresh()
        markdown_loader.refresh_cache()
        chart_data.refresh()

    index = (output_dir / "index.html").read_text(encoding="utf-8")
    assert "Test Blog" in index
    assert 'href="/blog/one/"' in index
    assert 'href="/blog/static/style.css"' in index

    tags = (output_dir / "tags" / "index.html").read_text(encoding="utf-8")
    assert "Machine Learning (2)" in tags

    tag_page = (output_dir / "tags" / "machine-learning" / "index.html").read_text(encoding="utf-8")
    assert "2 posts tagged with &#34;Machine Learning&#34;" in tag_page
    assert tag_page.index("Two") < tag_page.index("One")

    assert (output_dir / "one" / "index.html").exists()
    assert (output_dir / "two" / "index.html").exists()
    assert "<svg" in (output_dir / "charts" / "demo" / "index.html").read_text(encoding="utf-8")
    assert (output_dir / "static" / "style.css").exists()
    assert (output_dir / ".nojekyll").exists()
    assert "share the slug 'machine-learning'" in caplog.text
    assert "no URL-safe characters" in caplog.text


def test_url_factory():
    builder = build_static.build_url_factory("")
    assert builder("homepage", {}) == "/"
    assert builder("tag_posts", {"tag_slug": "go"}) == "/tags/go/"
    assert builder("post_detail", {"slug": "hello"}) == "/hello/"
    assert build_static.build_url_factory("/repo/")("chart_detail", {"chart_slug": "x"}) == "/repo/charts/x/"
