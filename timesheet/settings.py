from functools import lru_cache
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite:///./timesheet.db"
    app_name: str = "TimesheetPro"
    cors_allow_origins: str = "http://127.0.0.1:5173,http://localhost:5173"
    timesheet_timezone: str = "Europe/Rome"
    team_max_users: int = 10
    schema_guard_strict: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> list[str]:
    raw = get_settings().cors_allow_origins
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@lru_cache
def get_timesheet_timezone() -> ZoneInfo:
    raw_name = (get_settings().timesheet_timezone or "").strip() or "Europe/Rome"
    try:
        return ZoneInfo(raw_name)
    except Exception:
        return ZoneInfo("Europe/Rome")
