from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    allow_geojson: bool = False
    max_coords: int = 500
    sources: list[str] = []
    data_endpoint: str = ""
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "POLYLINE_PIP_"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
