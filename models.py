from typing import NamedTuple, Optional

from pydantic import BaseModel, Field, model_validator

from config import settings


def film_url(slug: str) -> str:
    return f"{settings.letterboxd_base_url}/film/{slug}/"


class FilmRecord(BaseModel):
    title: str
    year: str = ""
    slug: str = Field(min_length=1)
    source_url: str = ""

    @model_validator(mode="after")
    def _default_source_url(self) -> "FilmRecord":
        if not self.source_url:
            self.source_url = film_url(self.slug)
        return self


class ListIdentity(NamedTuple):
    """Owner + list segments of a Letterboxd list, lowercased."""

    owner: str
    list_slug: str

    @property
    def path(self) -> str:
        return f"/{self.owner}/list/{self.list_slug}"

    @property
    def url(self) -> str:
        return f"{settings.letterboxd_base_url}{self.path}/"

    @property
    def feed_url(self) -> str:
        return f"{settings.letterboxd_base_url}{self.path}/rss/"

    def page_url(self, page: int) -> str:
        if page <= 1:
            return self.url
        return f"{settings.letterboxd_base_url}{self.path}/page/{page}/"


class FilmListResponse(BaseModel):
    films: list[FilmRecord]


class ErrorResponse(BaseModel):
    error: str


class FilmPageDetails(BaseModel):
    description: Optional[str] = None
    rating: Optional[float] = None


class MovieDetails(BaseModel):
    tmdb_id: str
    title: str
    year: str = "Unknown"
    runtime: str = "Unknown"
    director: str = "Unknown"
    description: Optional[str] = None
    tmdb_rating: Optional[float] = None
    tmdb_rating_class: Optional[str] = None
    letterboxd_rating: Optional[float] = None
    letterboxd_rating_class: Optional[str] = None
    poster: Optional[str] = None
    backdrop: Optional[str] = None
    slug: Optional[str] = None
    letterboxd_url: Optional[str] = None
    tmdb_url: Optional[str] = None
