from app.services import chart_data
from app.services.isotype_series import circle_icon


def test_bundled_demo_chart():
    chart_data.refresh()
    chart = chart_data.get_chart("isotype-demo")
    assert chart is not None
    assert [(column.label, column.count) for column in chart.columns] == [
        ("Clock", 8),
        ("Cat", 11),
        ("Lock", 3),
    ]
    assert all(column.icon is not None for column in chart.columns)


def test_invalid_columns_are_skipped(tmp_path):
    (tmp_path / "charts.yaml").write_text(
        """
charts:
  - title: Pets
    icon: circle
    height: 10
    columns:
      - {label: Cats, count: 3, fill: "#ff0000"}
      - {label: Dogs, count: -1}
      - {label: Cats, count: 5}
      - {count: 2}
      - {label: Fish, count: 0, icon: "glyph:F"}
""",
        encoding="utf-8",
    )
    try:
        chart_data.refresh(tmp_path)
        (chart,) = chart_data.list_charts()
        assert chart.slug == "pets"
        assert chart.height == chart_data.DEFAULT_CHART_HEIGHT
        assert [column.label for column in chart.columns] == ["Cats", "Fish"]
        cats, fish = chart.columns
        assert cats.fill == "#ff0000"
        assert cats.icon is circle_icon
        assert fish.icon is not circle_icon
    finally:
        chart_data.refresh()


def test_malformed_file_yields_no_charts(tmp_path):
    (tmp_path / "charts.yaml").write_text("charts: {not: a list}", encoding="utf-8")
    try:
        chart_data.refresh(tmp_path)
        assert chart_data.list_charts() == []
    finally:
        chart_data.refresh()


def test_resolve_icon():
    assert chart_data.resolve_icon("circle") is circle_icon
    assert chart_data.resolve_icon("unknown") is None
    assert chart_data.resolve_icon(None) is None
    assert callable(chart_data.resolve_icon("glyph:★"))


def test_chart_slugs_are_url_safe(tmp_path):
    (tmp_path / "charts.yaml").write_text(
        """
charts:
  - title: "../Pets / Owners?"
    columns: [{label: Cats, count: 1}]
  - slug: "../escape"
    title: Other
    columns: [{label: Dogs, count: 1}]
""",
        encoding="utf-8",
    )
    try:
        chart_data.refresh(tmp_path)
        assert [chart.slug for chart in chart_data.list_charts()] == ["pets-owners", "escape"]
    finally:
        chart_data.refresh()
