"""
backend/app/config.py

Purpose:
    Central settings loading for the football-data backend.

Dependencies:
    - pydantic-settings
    - pathlib
"""

from pathlib import Path

from pydantic_settings import BaseSettings

# Prefer backend/.env, fallback to project-root .env.
_BACKEND_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
_ROOT_ENV_FILE = Path(__file__).resolve().parent.parent.parent / ".env"


class Settings(BaseSettings):
    # API-Football (v3)
    API_FOOTBALL_KEY: str = ""
    API_FOOTBALL_BASE_URL: str = "https://v3.football.api-sports.io"
    API_FOOTBALL_TIMEOUT_SECONDS: float = 15.0
    API_FOOTBALL_MAX_RETRIES: int = 3
    API_FOOTBALL_BASE_DELAY_SECONDS: float = 1.0
    API_FOOTBALL_CIRCUIT_THRESHOLD: int = 3  # consecutive failed requests before the breaker opens
    API_FOOTBALL_CIRCUIT_RECOVERY_SECONDS: float = 300.0

    # In-memory response cache
    FOOTBALL_CACHE_TTL_SECONDS: int = 300  # 5 minutes
    FOOTBALL_CACHE_COALESCE: bool = False  # share one upstream call per key under concurrency

    # Leagues scanned for the player comparison picker (Ligue 1, PL, La Liga, Serie A, Bundesliga)
    FOOTBALL_COMPARISON_LEAGUES: str = "61,39,140,135,78"

    BACKEND_CORS_ORIGINS: str = "http://localhost:5173"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    model_config = {
        "env_file": (str(_BACKEND_ENV_FILE), str(_ROOT_ENV_FILE)),
        "extra": "ignore",
    }

    @property
    def comparison_league_ids(self) -> list[int]:
        return [int(part) for part in self.FOOTBALL_COMPARISON_LEAGUES.split(",") if part.strip()]


settings = Settings()
