from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Web server
    webapp_host: str = Field(default="0.0.0.0", alias="WEBAPP_HOST")
    webapp_port: int = Field(default=5000, alias="PORT")
    public_base_url: Optional[str] = Field(default=None, alias="PUBLIC_BASE_URL")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    # Temp / merged output
    temp_dir: Path = Field(default=Path("./temp"), alias="TEMP_DIR")
    temp_max_age_min: int = Field(default=30, alias="TEMP_MAX_AGE_MIN")
    cleanup_interval_sec: int = Field(default=900, alias="CLEANUP_INTERVAL_SEC")

    # External tools
    ytdlp_binary: Optional[str] = Field(default=None, alias="YTDLP_BINARY")
    ffmpeg_location: Optional[str] = Field(default=None, alias="FFMPEG_LOCATION")
    user_agent: Optional[str] = Field(default=None, alias="USER_AGENT")
    referer: str = Field(default="https://www.youtube.com/", alias="REFERER")

    # Extraction
    extract_timeout_sec: int = Field(default=45, alias="EXTRACT_TIMEOUT_SEC")
    extract_socket_timeout_sec: int = Field(default=60, alias="EXTRACT_SOCKET_TIMEOUT_SEC")
    extract_retries: int = Field(default=0, alias="EXTRACT_RETRIES")
    accepted_hosts: List[str] = Field(
        default_factory=lambda: ["youtube.com", "youtu.be"], alias="ACCEPTED_HOSTS"
    )
    mirror_domains: Dict[str, List[str]] = Field(
        default_factory=lambda: {"youtube.com": ["m.youtube.com", "music.youtube.com"]},
        alias="MIRROR_DOMAINS",
    )
    browser_fallback: bool = Field(default=True, alias="BROWSER_FALLBACK")
    browser_timeout_sec: int = Field(default=60, alias="BROWSER_TIMEOUT_SEC")

    # Merge
    merge_socket_timeout_sec: int = Field(default=120, alias="MERGE_SOCKET_TIMEOUT_SEC")
    merge_retries: int = Field(default=2, alias="MERGE_RETRIES")
    merge_backoff_base_sec: float = Field(default=2.0, alias="MERGE_BACKOFF_BASE_SEC")
    merge_backoff_factor: float = Field(default=2.0, alias="MERGE_BACKOFF_FACTOR")

    # Credentials
    cookies_file: Path = Field(default=Path("./youtube-cookies.txt"), alias="COOKIES_FILE")
    cookies_search_paths: List[Path] = Field(
        default_factory=lambda: [Path("/etc/secrets/youtube-cookies.txt")],
        alias="COOKIES_SEARCH_PATHS",
    )

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    debug: bool = Field(default=False, alias="DEBUG")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, v: str) -> str:
        level = v.upper()
        allowed = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "TRACE"}
        if level not in allowed:
            raise ValueError(f"Invalid LOG_LEVEL={v!r}. Allowed: {sorted(allowed)}")
        return level

    @field_validator(
        "extract_timeout_sec",
        "extract_socket_timeout_sec",
        "merge_socket_timeout_sec",
        "browser_timeout_sec",
        "temp_max_age_min",
        "cleanup_interval_sec",
    )
    @classmethod
    def _check_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("extract_retries", "merge_retries")
    @classmethod
    def _check_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()
