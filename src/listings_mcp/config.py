"""Configuration for the listings client."""

from pathlib import Path

from pydantic_settings import BaseSettings


class ListingsConfig(BaseSettings):
    environment: str = "production"
    base_url: str = "http://localhost:8000"
    dev_api_url: str = "https://real-state-backend-kewm.onrender.com"
    timeout_seconds: float = 30.0
    impersonate_browser: str = "chrome136"
    session_file: Path = Path.home() / ".listings_mcp" / "session.json"
    default_page_size: int = 5

    model_config = {"env_prefix": "LISTINGS_"}

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("dev", "development")
