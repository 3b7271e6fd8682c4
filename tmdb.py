import asyncio
import logging
import re
from typing import Optional

import httpx

from config import settings
from errors import ConfigurationError, MovieNotFoundError
from models import MovieDetails, film_url
from scraper import fetch_film_details

logger = logging.getLogger(__name__)

TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p"
TMDB_MOVIE_PAGE = "https://www.themoviedb.org/movie"

TRAILING_YEAR_RE = re.compile(r"\s*\((\d{4})\)\s*$")

# Lower bounds on a 5-point scale, best first.
RATING_CLASSES = [
    (4.2, "rating-excellent"),
    (3.5, "rating-great"),
    (2.5, "rating-good"),
    (1.8, "rating-mixed"),
]


def parse_title_year(title: str) -> tuple[str, Optional[str]]:
    """Split a trailing "(1994)" off a title."""
    match = TRAILING_YEAR_RE.search(title)
    if not match:
        return title.strip(), None
    return title[: match.start()].strip(), match.group(1)


def rating_class(rating: Optional[float], scale: int = 5) -> Optional[str]:
    if rating is None:
        return None
    normalized = rating * 5 / scale
    for threshold, css_class in RATING_CLASSES:
        if normalized >= threshold:
            return css_class
    return "rating-poor"


async def search_movie(client: httpx.AsyncClient, api_key: str, title: str) -> Optional[str]:
    """Search TMDB by title. Returns the id of the first result, or None."""
    clean_title, year = parse_title_year(title)
    params = {"api_key": api_key, "query": clean_title}
    if year:
        params["year"] = year

    try:
        response = await client.get(f"{settings.tmdb_base_url}/search/movie", params=params)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("TMDB search for %r failed: %s", clean_title, exc)
        return None

    results = response.json().get("results", [])
    return str(results[0]["id"]) if results else None


async def get_movie_details(client: httpx.AsyncClient, api_key: str, tmdb_id: str) -> MovieDetails:
    """Fetch a movie with its credits and shape it for display."""
    response = await client.get(
        f"{settings.tmdb_base_url}/movie/{tmdb_id}",
        params={"api_key": api_key, "append_to_response": "credits"},
    )
    response.raise_for_status()
    data = response.json()

    crew = (data.get("credits") or {}).get("crew", [])
    director = next((p.get("name") for p in crew if p.get("job") == "Director"), None)

    release_date = data.get("release_date") or ""
    vote_average = data.get("vote_average")
    tmdb_rating = round(float(vote_average), 1) if vote_average else None
    poster_path = data.get("poster_path")
    backdrop_path = data.get("backdrop_path")

    return MovieDetails(
        tmdb_id=str(tmdb_id),
        title=data.get("title") or "",
        year=release_date.split("-")[0] if release_date else "Unknown",
        runtime=f"{data['runtime']} min" if data.get("runtime") else "Unknown",
        director=director or "Unknown",
        description=data.get("overview") or None,
        tmdb_rating=tmdb_rating,
        tmdb_rating_class=rating_class(tmdb_rating, scale=10),
        poster=f"{TMDB_IMAGE_BASE}/w500{poster_path}" if poster_path else None,
        backdrop=f"{TMDB_IMAGE_BASE}/w1280{backdrop_path}" if backdrop_path else None,
        tmdb_url=f"{TMDB_MOVIE_PAGE}/{tmdb_id}",
    )


async def enrich_movie(api_key: str, title: str, slug: Optional[str] = None) -> MovieDetails:
    """Look a film up on TMDB and merge in its Letterboxd description and rating."""
    if not api_key:
        raise ConfigurationError()

    async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
        tmdb_id = await search_movie(client, api_key, title)
        if tmdb_id is None:
            raise MovieNotFoundError()

        if slug:
            details, letterboxd = await asyncio.gather(
                get_movie_details(client, api_key, tmdb_id),
                fetch_film_details(client, slug),
            )
        else:
            details = await get_movie_details(client, api_key, tmdb_id)
            letterboxd = None

    if letterboxd is not None:
        details.description = letterboxd.description or details.description
        details.letterboxd_rating = letterboxd.rating
        details.letterboxd_rating_class = rating_class(letterboxd.rating)
    if slug:
        details.slug = slug
        details.letterboxd_url = film_url(slug)
    return details
