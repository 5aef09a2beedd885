from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p

from .base import ConfigSection


class ServeSettings(ConfigSection):
    host: p.IPvAnyAddress
    port: t.Annotated[int, ant.Gt(0), ant.Le(65535)]


class WebSettings(ConfigSection):
    backend: ServeSettings
    cors_origins: list[str] = []
