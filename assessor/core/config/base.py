import typing as t

from pydantic_settings import BaseSettings as PydanticBaseSettings

from assessor.model import BaseModel


class BaseSettings(PydanticBaseSettings, BaseModel):  # pyright: ignore [reportIncompatibleVariableOverride]
    """Root of a settings tree; only roots consult settings sources."""

    def __init__(self, cf: dict[str, t.Any] | None = None, **kwargs: t.Any):
        # specifically allow initialization with a dict
        if cf is not None:
            kwargs = {**cf, **kwargs}
        super().__init__(**kwargs)


class ConfigSection(BaseModel):
    """A nested section of a settings tree, validated from its parent's data."""

    def __init__(self, cf: dict[str, t.Any] | None = None, **kwargs: t.Any):
        if cf is not None:
            kwargs = {**cf, **kwargs}
        super().__init__(**kwargs)
