from __future__ import annotations

import typing as t

import pydantic as p

from .base import ConfigSection


class StorageSettings(ConfigSection):
    persistent: PersistentSettings


class PersistentSettings(ConfigSection):
    # a complete SQLAlchemy URL takes precedence over `postgresql`
    url: str | None = None
    postgresql: PostgresqlSettings | None = None
    echo: bool = False

    @p.model_validator(mode="after")
    def check_target(self) -> PersistentSettings:
        if self.url is None and self.postgresql is None:
            raise ValueError("one of storage.persistent.url or storage.persistent.postgresql is required")
        return self


class PostgresqlSettings(ConfigSection):
    host: p.IPvAnyAddress | str | None = None
    port: int = 5432
    database: str
    driver: t.Literal["postgresql+psycopg"] = "postgresql+psycopg"
