"""List-fetch pipeline: validate the URL, query both sources, pick one, dedupe."""

import asyncio
import logging
import re
from typing import Optional

import httpx

from config import settings
from errors import EmptyResultError, FetchFailedError, InvalidInputError
from feed import fetch_feed
from models import FilmRecord, ListIdentity
from scraper import scrape_list

logger = logging.getLogger(__name__)

LIST_PATH_RE = re.compile(r"letterboxd\.com/([^/?#]+)/list/([^/?#]+)", re.IGNORECASE)


def parse_list_url(url: Optional[str]) -> ListIdentity:
    """Derive the list identity from a list URL, or raise InvalidInputError."""
    url = (url or "").strip()
    if not url:
        raise InvalidInputError("URL is required")

    lowered = url.lower()
    if "letterboxd.com" not in lowered or "/list/" not in lowered:
        raise InvalidInputError()

    match = LIST_PATH_RE.search(url)
    if not match:
        raise InvalidInputError()
    return ListIdentity(owner=match.group(1).lower(), list_slug=match.group(2).lower())


def select_films(
    scraped: Optional[list[FilmRecord]], feed: Optional[list[FilmRecord]]
) -> list[FilmRecord]:
    """The scraped pages win whenever they found anything; the feed is a fallback."""
    if scraped:
        return scraped
    return feed or []


def dedupe_films(films: list[FilmRecord]) -> list[FilmRecord]:
    seen: set[str] = set()
    unique: list[FilmRecord] = []
    for film in films:
        if film.slug in seen:
            continue
        seen.add(film.slug)
        unique.append(film)
    return unique


def _source_result(name: str, identity: ListIdentity, result):
    if isinstance(result, Exception):
        logger.warning("%s source failed for %s: %s", name, identity.path, result)
        return None
    if isinstance(result, BaseException):
        raise result
    return result


async def gather_films(client: httpx.AsyncClient, identity: ListIdentity) -> list[FilmRecord]:
    """Run both sources concurrently, wait for both, then select and dedupe."""
    scraped, feed = await asyncio.gather(
        scrape_list(client, identity),
        fetch_feed(client, identity),
        return_exceptions=True,
    )
    scraped = _source_result("pages", identity, scraped)
    feed = _source_result("feed", identity, feed)

    chosen = select_films(scraped, feed)
    source = "pages" if scraped else "feed"
    films = dedupe_films(chosen)
    logger.info(
        "Selected %s for %s: %d films (%d after dedupe)",
        source, identity.path, len(chosen), len(films),
    )
    return films


async def fetch_list(url: Optional[str]) -> list[FilmRecord]:
    """Fetch every film of a public Letterboxd list.

    Raises InvalidInputError before any network call when the URL is not a
    list URL, EmptyResultError when neither source produced a film, and
    FetchFailedError for anything unexpected.
    """
    identity = parse_list_url(url)
    logger.info("Fetching list %s", identity.path)

    try:
        async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
            films = await gather_films(client, identity)
    except Exception as exc:
        logger.exception("Error fetching list %s", identity.path)
        raise FetchFailedError() from exc

    if not films:
        raise EmptyResultError()
    return films
