import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.requests import Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from config import settings
from errors import AppError, FetchFailedError
from lists import fetch_list
from models import FilmListResponse, MovieDetails
from tmdb import enrich_movie

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory="templates")

app = FastAPI()
app.mount("/static", StaticFiles(directory="static"), name="static")


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    return templates.TemplateResponse(request, "index.html")


@app.get("/api/fetch-list", response_model=FilmListResponse)
async def api_fetch_list(url: Optional[str] = None):
    films = await fetch_list(url)
    return FilmListResponse(films=films)


@app.get("/api/movie-details", response_model=MovieDetails)
async def api_movie_details(title: Optional[str] = None, slug: Optional[str] = None):
    if not title:
        return JSONResponse(status_code=400, content={"error": "Title is required"})

    try:
        return await enrich_movie(settings.tmdb_api_key, title, slug or None)
    except AppError:
        raise
    except Exception as exc:
        logger.exception("Error fetching movie details for %r", title)
        raise FetchFailedError("Failed to fetch movie details") from exc
