"""Application configuration — pydantic sections built from the environment."""

import os

from pydantic import BaseModel


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///mgstream.db"
    echo: bool = False


class ShockConfig(BaseModel):
    url: str = "https://shock.mg-rast.org"
    token: str = ""  # sent as "OAuth <token>" when set
    timeout: float = 300.0


class AnnotationConfig(BaseModel):
    m5nr_default_version: int = 1
    chunk_size: int = 2000             # distinct md5s per resolve/fetch cycle
    yield_per: int = 1000              # rows buffered by the server-side cursor
    default_evalue: int = 5            # negative exponent
    default_identity: int = 60         # percent
    default_length: int = 15           # alignment length
    collapse_duplicate_hits: bool = False


class AppConfig(BaseModel):
    database: DatabaseConfig = DatabaseConfig()
    shock: ShockConfig = ShockConfig()
    annotation: AnnotationConfig = AnnotationConfig()
    debug: bool = False
    cors_origins: list[str] = ["*"]


def _flag(name: str, default: str = "") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


def _build_config() -> AppConfig:
    """Build config from environment variables."""
    return AppConfig(
        database=DatabaseConfig(
            url=os.environ.get("DATABASE_URL", "sqlite:///mgstream.db"),
            echo=_flag("DB_ECHO"),
        ),
        shock=ShockConfig(
            url=os.environ.get("SHOCK_URL", "https://shock.mg-rast.org"),
            token=os.environ.get("SHOCK_TOKEN", ""),
            timeout=float(os.environ.get("SHOCK_TIMEOUT", "300")),
        ),
        annotation=AnnotationConfig(
            m5nr_default_version=int(os.environ.get("M5NR_VERSION", "1")),
            chunk_size=int(os.environ.get("ANNOTATION_CHUNK_SIZE", "2000")),
            yield_per=int(os.environ.get("ANNOTATION_YIELD_PER", "1000")),
            collapse_duplicate_hits=_flag("COLLAPSE_DUPLICATE_HITS"),
        ),
        debug=_flag("DEBUG"),
        cors_origins=[
            o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()
        ],
    )


config = _build_config()
