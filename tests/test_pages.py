import pytest
from fastapi.testclient import TestClient

from app.main import app


@pytest.fixture()
def client():
    with TestClient(app) as test_client:
        yield test_client


def test_healthcheck(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_homepage_lists_posts(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "Hello World" in response.text
    assert "Isotype charts" in response.text


def test_tags_index_lists_counts_and_links(client):
    response = client.get("/tags/")
    assert response.status_code == 200
    assert "react (2)" in response.text
    assert "/tags/data-visualisation/" in response.text


def test_tag_page_filters_posts(client):
    response = client.get("/tags/react/")
    assert response.status_code == 200
    assert "2 posts tagged with &#34;react&#34;" in response.text
    assert "View all tags" in response.text
    assert "Buttons with loading spinners" in response.text
    assert "Hello World" not in response.text


def test_unknown_tag_is_404(client):
    assert client.get("/tags/not-a-tag/").status_code == 404


def test_post_detail(client):
    response = client.get("/hello-world/")
    assert response.status_code == 200
    assert "This is my first post" in response.text
    assert client.get("/no-such-post/").status_code == 404


def test_chart_page_highlights_active_column(client):
    response = client.get("/charts/isotype-demo/", params={"active": "Cat"})
    assert response.status_code == 200
    assert "<svg" in response.text
    assert "fill=\"#fcba03\"" in response.text
    assert "?active=Lock" in response.text
    assert "Selected: Cat" in response.text
    assert client.get("/charts/missing/").status_code == 404
