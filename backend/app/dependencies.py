from functools import lru_cache

from backend.app.config import AppConfig


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()
