import httpx
import pytest
import respx

from errors import SourceUnavailableError
from feed import fetch_feed, parse_feed, slug_from_link
from models import ListIdentity

FEED_URL = "https://letterboxd.com/alice/list/favorites/rss/"
IDENTITY = ListIdentity(owner="alice", list_slug="favorites")


def test_slug_from_link():
    assert slug_from_link("https://letterboxd.com/film/alien/") == "alien"
    assert slug_from_link("https://letterboxd.com/alice/film/the-godfather/1/") == "the-godfather"
    assert slug_from_link("https://letterboxd.com/alice/") == ""
    assert slug_from_link("") == ""


def test_parse_feed_prefers_film_title_and_appends_year(make_feed):
    xml = make_feed(
        ("Alien", "1979", "https://letterboxd.com/alice/film/alien/"),
        ("Heat", "", "https://letterboxd.com/film/heat/"),
    )
    films = parse_feed(xml)
    assert [f.slug for f in films] == ["alien", "heat"]
    assert films[0].title == "Alien (1979)"
    assert films[0].year == "1979"
    assert films[0].source_url == "https://letterboxd.com/alice/film/alien/"
    assert films[1].title == "Heat"
    assert films[1].year == ""


def test_parse_feed_drops_items_without_film_link(make_feed):
    xml = make_feed(
        ("Alien", "1979", "https://letterboxd.com/film/alien/"),
        ("Not a film", "", "https://letterboxd.com/alice/"),
    )
    assert [f.slug for f in parse_feed(xml)] == ["alien"]


def test_parse_feed_rejects_html():
    with pytest.raises(SourceUnavailableError):
        parse_feed("<!DOCTYPE html><html><body>Not found</body></html>")


def test_parse_feed_rejects_feed_without_items(make_feed):
    with pytest.raises(SourceUnavailableError):
        parse_feed(make_feed())


@respx.mock
async def test_fetch_feed_returns_films(make_feed):
    respx.get(FEED_URL).mock(
        return_value=httpx.Response(
            200, text=make_feed(("Alien", "1979", "https://letterboxd.com/film/alien/"))
        )
    )
    async with httpx.AsyncClient() as client:
        films = await fetch_feed(client, IDENTITY)
    assert [f.slug for f in films] == ["alien"]


@respx.mock
async def test_fetch_feed_treats_html_page_as_no_data():
    respx.get(FEED_URL).mock(return_value=httpx.Response(200, text="<html>error</html>"))
    async with httpx.AsyncClient() as client:
        assert await fetch_feed(client, IDENTITY) is None


@respx.mock
async def test_fetch_feed_returns_none_on_http_failure():
    route = respx.get(FEED_URL).mock(return_value=httpx.Response(404))
    async with httpx.AsyncClient() as client:
        assert await fetch_feed(client, IDENTITY) is None
    assert route.call_count == 3


@respx.mock
async def test_fetch_feed_never_raises_on_network_error():
    respx.get(FEED_URL).mock(side_effect=httpx.ConnectTimeout("slow"))
    async with httpx.AsyncClient() as client:
        assert await fetch_feed(client, IDENTITY) is None
