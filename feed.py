"""Film records from a Letterboxd list's RSS feed.

The feed only carries the most recent entries of a list, so it is a fallback
for when the HTML pages give nothing.
"""

import logging
import re
from typing import Optional

import feedparser
import httpx

from errors import SourceUnavailableError
from fetcher import FEED_ACCEPT, default_headers, fetch_with_retry
from models import FilmRecord, ListIdentity

logger = logging.getLogger(__name__)

# Matches both /film/<slug>/ and user-scoped /<user>/film/<slug>/ links.
FILM_LINK_RE = re.compile(r"letterboxd\.com/(?:[^/]+/)?film/([^/?#]+)", re.IGNORECASE)


def slug_from_link(link: str) -> str:
    match = FILM_LINK_RE.search(link or "")
    return match.group(1) if match else ""


def _looks_like_feed(text: str) -> bool:
    head = text.lstrip()
    return head.startswith("<?xml") or head.startswith("<rss")


def parse_feed(text: str) -> list[FilmRecord]:
    """Parse feed XML into film records, dropping items without a film link."""
    if not _looks_like_feed(text):
        raise SourceUnavailableError("response is not an RSS document")

    parsed = feedparser.parse(text)
    if not parsed.entries:
        raise SourceUnavailableError("feed has no items")

    films: list[FilmRecord] = []
    for entry in parsed.entries:
        link = entry.get("link", "")
        slug = slug_from_link(link)
        if not slug:
            continue

        year = (entry.get("letterboxd_filmyear") or "").strip()
        title = (entry.get("letterboxd_filmtitle") or entry.get("title") or "").strip()
        if title and year and not title.endswith(f"({year})"):
            title = f"{title} ({year})"

        films.append(FilmRecord(title=title, year=year, slug=slug, source_url=link))
    return films


async def _load_feed(client: httpx.AsyncClient, identity: ListIdentity) -> str:
    response = await fetch_with_retry(
        client, identity.feed_url, headers=default_headers(FEED_ACCEPT)
    )
    if response is None:
        raise SourceUnavailableError(f"no successful response from {identity.feed_url}")
    return response.text


async def fetch_feed(
    client: httpx.AsyncClient, identity: ListIdentity
) -> Optional[list[FilmRecord]]:
    """Best-effort feed lookup. Returns None instead of raising."""
    try:
        text = await _load_feed(client, identity)
        films = parse_feed(text)
    except Exception as exc:
        logger.warning("RSS feed for %s unavailable: %s", identity.path, exc)
        return None

    logger.info("RSS feed for %s yielded %d films", identity.path, len(films))
    return films
