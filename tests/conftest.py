import pytest

from config import settings


@pytest.fixture(autouse=True)
def no_delays(monkeypatch):
    """Retries and page walks run without sleeping."""
    monkeypatch.setattr(settings, "retry_delay", 0.0)
    monkeypatch.setattr(settings, "page_delay", 0.0)


def _feed_item(title: str, year: str, link: str) -> str:
    extra = ""
    if year:
        extra = (
            f"<letterboxd:filmTitle>{title}</letterboxd:filmTitle>"
            f"<letterboxd:filmYear>{year}</letterboxd:filmYear>"
        )
    return f"<item><title>{title}</title><link>{link}</link>{extra}</item>"


@pytest.fixture
def make_feed():
    """Build list RSS with (title, year, link) items; year "" omits the letterboxd fields."""

    def _make(*items: tuple[str, str, str]) -> str:
        body = "\n".join(_feed_item(*item) for item in items)
        return (
            '<?xml version="1.0" encoding="utf-8"?>\n'
            '<rss version="2.0" xmlns:letterboxd="https://letterboxd.com">\n'
            "<channel>\n"
            "<title>Letterboxd - favorites</title>\n"
            "<link>https://letterboxd.com/alice/list/favorites/</link>\n"
            "<description>A list</description>\n"
            f"{body}\n"
            "</channel>\n"
            "</rss>\n"
        )

    return _make


def _list_item(slug: str, name: str) -> str:
    return (
        '<li class="posteritem">'
        f'<div class="react-component" data-component-class="LazyPoster" '
        f'data-item-slug="{slug}" data-item-name="{name}" data-target-link="/film/{slug}/">'
        f'<img class="image" alt="{name}" />'
        "</div></li>"
    )


@pytest.fixture
def make_list_page():
    """Build one list page from (slug, name) pairs, optionally with a next link."""

    def _make(*films: tuple[str, str], next_page: bool = False) -> str:
        items = "\n".join(_list_item(slug, name) for slug, name in films)
        pagination = (
            '<div class="paginate-nextprev"><a class="next" href="#">Older</a></div>'
            if next_page
            else ""
        )
        return f'<html><body>\n<ul class="poster-list">\n{items}\n</ul>\n{pagination}\n</body></html>'

    return _make
