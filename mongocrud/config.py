import os
from functools import lru_cache
from pathlib import Path as _Path

from dotenv import load_dotenv as _load_dotenv
from pydantic import BaseModel, Field

# Load .env early so the defaults below see it
_load_dotenv(dotenv_path=_Path(__file__).resolve().parent.parent / ".env", override=False)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Settings(BaseModel):
    # Support multiple common env var names for Mongo connection string
    mongo_uri: str = Field(
        default_factory=lambda: (
            os.getenv("MONGO_URI")
            or os.getenv("MONGODB_URI")
            or os.getenv("MONGO_URL")
            or "mongodb://localhost:27017"
        )
    )
    mongo_db: str = Field(default_factory=lambda: os.getenv("MONGO_DB_NAME", "mongocrud"))
    # Optional: force direct connection (applies to non-SRV URIs)
    mongo_direct: bool = Field(default_factory=lambda: _env_flag("MONGO_DIRECT"))
    max_pool_size: int = Field(default_factory=lambda: int(os.getenv("MONGO_MAX_POOL_SIZE", "20")))

    # Fast-fail defaults so an unreachable store surfaces quickly
    server_selection_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "3000"))
    )
    connect_timeout_ms: int = Field(default_factory=lambda: int(os.getenv("MONGO_CONNECT_TIMEOUT_MS", "3000")))
    socket_timeout_ms: int = Field(default_factory=lambda: int(os.getenv("MONGO_SOCKET_TIMEOUT_MS", "5000")))

    # Swallow (and log) failures of delete_by_field instead of raising
    best_effort_deletes: bool = Field(default_factory=lambda: _env_flag("MONGO_BEST_EFFORT_DELETES"))


@lru_cache()
def get_settings() -> Settings:
    return Settings()
