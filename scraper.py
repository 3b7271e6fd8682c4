import asyncio
import json
import logging
import re
from typing import NamedTuple, Optional

import httpx
from bs4 import BeautifulSoup

from config import settings
from errors import SourceUnavailableError
from fetcher import default_headers, fetch_with_retry
from models import FilmPageDetails, FilmRecord, ListIdentity, film_url

logger = logging.getLogger(__name__)

LIST_ITEM_SELECTOR = "li.posteritem, li.poster-container, li.griditem"
POSTER_SELECTOR = "[data-item-slug], [data-film-slug], [data-target-link]"
NEXT_PAGE_SELECTOR = "a.next, a[rel='next']"


class PageResult(NamedTuple):
    films: list[FilmRecord]
    has_next: bool
    item_count: int


def _poster_slug(poster) -> str:
    slug = (poster.get("data-item-slug") or poster.get("data-film-slug") or "").strip()
    if not slug:
        target_link = (poster.get("data-target-link") or "").strip("/")
        # Expected format: film/<slug>
        parts = target_link.split("/")
        if len(parts) >= 2 and parts[0] == "film":
            slug = parts[1].strip()
    return slug


def _poster_title(poster) -> str:
    title = poster.get("data-item-name") or poster.get("data-film-name")
    if not title:
        img = poster.find("img")
        title = img["alt"] if img and img.get("alt") else ""
    return title.strip()


def parse_list_page(html: str) -> PageResult:
    """Parse one page of list HTML into its films and a has-next-page flag.

    ``item_count`` counts every list item container, including ones that were
    skipped for lacking a slug or title.
    """
    soup = BeautifulSoup(html, "html.parser")
    containers = soup.select(LIST_ITEM_SELECTOR)

    films: list[FilmRecord] = []
    for container in containers:
        poster = container.select_one(POSTER_SELECTOR)
        if poster is None:
            continue
        slug = _poster_slug(poster)
        title = _poster_title(poster)
        if not slug or not title:
            continue
        films.append(FilmRecord(title=title, slug=slug))

    has_next = soup.select_one(NEXT_PAGE_SELECTOR) is not None
    return PageResult(films=films, has_next=has_next, item_count=len(containers))


async def _fetch_page(client: httpx.AsyncClient, url: str) -> str:
    try:
        response = await fetch_with_retry(client, url, headers=default_headers())
    except httpx.HTTPError as exc:
        raise SourceUnavailableError(f"{type(exc).__name__} fetching {url}") from exc
    if response is None:
        raise SourceUnavailableError(f"no successful response from {url}")
    return response.text


async def scrape_list(
    client: httpx.AsyncClient,
    identity: ListIdentity,
    max_pages: Optional[int] = None,
    max_consecutive_failures: Optional[int] = None,
    request_delay: Optional[float] = None,
) -> list[FilmRecord]:
    """Walk the list's HTML pages in order and collect every film.

    Stops on an empty page, a page without a next link, the page ceiling, or
    too many consecutive failed pages. A failed first page ends the walk.
    Page failures are logged and never raised.
    """
    max_pages = settings.max_pages if max_pages is None else max_pages
    max_failures = (
        settings.max_consecutive_failures
        if max_consecutive_failures is None
        else max_consecutive_failures
    )
    request_delay = settings.page_delay if request_delay is None else request_delay

    films: list[FilmRecord] = []
    page = 1
    failures = 0

    while page <= max_pages:
        try:
            html = await _fetch_page(client, identity.page_url(page))
        except SourceUnavailableError as exc:
            logger.warning("Page %d of %s failed: %s", page, identity.path, exc)
            if page == 1:
                break
            failures += 1
            if failures >= max_failures:
                break
            page += 1
            continue

        failures = 0
        result = parse_list_page(html)
        if result.item_count == 0:
            break
        films.extend(result.films)
        logger.debug("Page %d of %s: %d films", page, identity.path, len(result.films))

        if not result.has_next:
            break

        page += 1
        if request_delay:
            await asyncio.sleep(request_delay)

    logger.info("Scraped %d films from %s", len(films), identity.path)
    return films


def _structured_data(soup: BeautifulSoup) -> list[dict]:
    blocks: list[dict] = []
    for script in soup.select("script[type='application/ld+json']"):
        raw = script.string or script.get_text()
        # Letterboxd wraps the JSON in /* <![CDATA[ */ ... /* ]]> */
        cleaned = re.sub(r"/\*.*?\*/", "", raw, flags=re.S).strip()
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            logger.debug("Skipping unparseable ld+json block: %s", exc)
            continue
        if isinstance(parsed, list):
            blocks.extend(item for item in parsed if isinstance(item, dict))
        elif isinstance(parsed, dict):
            blocks.append(parsed)
    return blocks


def _film_description(soup: BeautifulSoup, structured: list[dict]) -> Optional[str]:
    meta = soup.select_one("meta[name='description']")
    content = (meta.get("content") or "").strip() if meta else ""
    if content and "Letterboxd" not in content and len(content) > 20:
        return content

    for selector in ("div[class*='synopsis']", "div[class*='truncate']", "p[class*='text']"):
        element = soup.select_one(selector)
        text = element.get_text(strip=True) if element else ""
        if text:
            if len(text) > 20:
                return text
            break

    for block in structured:
        description = block.get("description")
        if isinstance(description, str) and len(description.strip()) > 20:
            return description.strip()
    return None


def _film_rating(soup: BeautifulSoup, structured: list[dict]) -> Optional[float]:
    for block in structured:
        aggregate = block.get("aggregateRating")
        if not isinstance(aggregate, dict):
            continue
        value = aggregate.get("ratingValue")
        if value:
            try:
                return float(value)
            except (TypeError, ValueError):
                continue

    meta = soup.select_one("meta[property='letterboxd:filmRating']")
    rating_text = (meta.get("content") or "").strip() if meta else ""
    if not rating_text:
        for selector in ("span[class*='rating']", "div[class*='average-rating']"):
            element = soup.select_one(selector)
            rating_text = element.get_text(strip=True) if element else ""
            if rating_text:
                break

    # Shown as "3.5" or "3.5/5"
    match = re.search(r"(\d+\.?\d*)", rating_text)
    if match:
        parsed = float(match.group(1))
        if 0 <= parsed <= 5:
            return parsed
    return None


def parse_film_page(html: str) -> FilmPageDetails:
    """Extract the synopsis and Letterboxd average rating from a film page."""
    soup = BeautifulSoup(html, "html.parser")
    structured = _structured_data(soup)
    rating = _film_rating(soup, structured)
    return FilmPageDetails(
        description=_film_description(soup, structured),
        rating=round(rating, 1) if rating else None,
    )


async def fetch_film_details(client: httpx.AsyncClient, slug: str) -> Optional[FilmPageDetails]:
    headers = default_headers()
    headers["Accept-Language"] = "en-US,en;q=0.9"
    try:
        response = await fetch_with_retry(client, film_url(slug), headers=headers)
    except httpx.HTTPError as exc:
        logger.warning("Letterboxd page for %s failed: %s", slug, exc)
        return None
    if response is None:
        return None
    try:
        return parse_film_page(response.text)
    except Exception as exc:
        logger.warning("Could not parse Letterboxd page for %s: %s", slug, exc)
        return None
