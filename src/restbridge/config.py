"""
Settings for restbridge, read from the environment (``RESTBRIDGE_`` prefix)
and an optional ``.env`` file through pydantic-settings.

``RESTBRIDGE_FORMATS`` takes a JSON object, e.g.
``{"json": ["application/json"], "xml": ["text/xml", "application/xml"]}``.
Its key order is the negotiation order, the first key being the default format.
"""
import typing
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_formats() -> typing.Dict[str, typing.List[str]]:
    return {
        "jsonld": ["application/ld+json"],
        "json": ["application/json"],
    }


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RESTBRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    formats: typing.Dict[str, typing.List[str]] = Field(
        default_factory=_default_formats,
        description="Format identifiers and the MIME types they stand for",
    )
    log_level: typing.Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Level of the log sink installed by setup_logging()",
    )

    @field_validator("formats")
    @classmethod
    def validate_formats(
        cls, v: typing.Dict[str, typing.List[str]]
    ) -> typing.Dict[str, typing.List[str]]:
        if not v:
            raise ValueError("at least one format must be configured")
        for format, mime_types in v.items():
            if not mime_types:
                raise ValueError(f'format "{format}" has no MIME type')
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
