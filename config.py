from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    tmdb_api_key: str = ""
    letterboxd_base_url: str = "https://letterboxd.com"
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    request_timeout: float = 15.0
    max_retries: int = 2
    retry_delay: float = 0.5
    max_pages: int = 50
    max_consecutive_failures: int = 2
    page_delay: float = 0.0
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
