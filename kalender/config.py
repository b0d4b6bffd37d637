"""Application settings, read from ``KALENDER_*`` environment variables or ``.env``."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from kalender.domain.models import EventColor, Room

DEFAULT_ROOMS = [
    Room(id="r3-ausstellung", name="R3 Ausstellung"),
    Room(id="r3-veranstaltung", name="R3 Veranstaltung"),
    Room(id="kabinett", name="Kabinett"),
    Room(id="speckdrumm", name="Speckdrumm"),
    Room(id="extern1", name="Extern 1"),
    Room(id="extern2", name="Extern 2"),
]


class Settings(BaseSettings):
    app_title: str = "Kulturforum Kalender API"
    log_level: str = "INFO"

    # JSON list in the environment, e.g. '[{"id": "saal", "name": "Saal"}]'
    rooms: list[Room] = Field(default_factory=lambda: list(DEFAULT_ROOMS))
    default_color: EventColor = EventColor.RED

    max_occurrences: int = Field(default=100, ge=1)
    recent_limit: int = Field(default=50, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="KALENDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def room_ids(self) -> set[str]:
        return {room.id for room in self.rooms}


@lru_cache
def get_settings() -> Settings:
    return Settings()
