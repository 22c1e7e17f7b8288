from datetime import datetime

from app.models.post import BlogPost, TagGroup


def test_listing_title_falls_back_to_slug():
    post = BlogPost(slug="untitled-post", title="", date=datetime(2020, 1, 1), excerpt="Body")
    assert post.listing_title == "untitled-post"
    titled = BlogPost(slug="titled", title="A Title", date=datetime(2020, 1, 1), excerpt="Body")
    assert titled.listing_title == "A Title"


def test_listing_summary_prefers_description():
    post = BlogPost(slug="a", title="A", date=datetime(2020, 1, 1), excerpt="The excerpt")
    assert post.listing_summary == "The excerpt"
    described = BlogPost(
        slug="b", title="B", date=datetime(2020, 1, 1), excerpt="The excerpt", description="Described"
    )
    assert described.listing_summary == "Described"


def test_display_date_format():
    post = BlogPost(slug="a", title="A", date=datetime(2019, 3, 2), excerpt="")
    assert post.display_date == "March 02, 2019"


def test_tag_group_slug():
    assert TagGroup(tag="Machine Learning", count=3).slug == "machine-learning"
