"""Configuration for the Linear team info tool.

Configuration is loaded from (highest precedence first):
- command-line flags (passed in as explicit overrides)
- environment variables
- a local `.env` file (if present)

Resolution never exits the process; callers get a `ConfigResolution` and
decide how to report a failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://api.linear.app/graphql"


class LinearSettings(BaseSettings):
    """Settings for a single report run.

    Environment variables:
    - LINEAR_API_KEY          (required)
    - LINEAR_TEAM_ID          (optional; first visible team when unset)
    - LINEAR_API_URL          (optional)
    - LOG_LEVEL               (optional)
    - LINEAR_REPORT_PATH      (optional)
    - LINEAR_TOP_LABELS       (optional)
    - LINEAR_MAX_CONCURRENCY  (optional)
    - LINEAR_REQUEST_TIMEOUT  (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `LinearSettings(_env_file=path_to_env)`.
    """

    api_key: str = Field(
        default="",
        validation_alias="LINEAR_API_KEY",
        description="Linear personal API key",
    )
    team_id: str | None = Field(
        default=None,
        validation_alias="LINEAR_TEAM_ID",
        description="Team to report on; defaults to the first team visible to the key",
    )
    api_url: str = Field(
        default=DEFAULT_API_URL,
        validation_alias="LINEAR_API_URL",
        description="Linear GraphQL endpoint",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    report_path: Path = Field(
        default=Path("linear_info.json"),
        validation_alias="LINEAR_REPORT_PATH",
        description="File the report is saved to and read back from by the same-day cache",
    )
    top_labels: int = Field(
        default=2,
        ge=1,
        validation_alias="LINEAR_TOP_LABELS",
        description="How many common labels to report per member",
    )
    max_concurrency: int = Field(
        default=4,
        ge=1,
        validation_alias="LINEAR_MAX_CONCURRENCY",
        description="Maximum number of members whose issues are fetched at once",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        validation_alias="LINEAR_REQUEST_TIMEOUT",
        description="Per-request HTTP timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("team_id", mode="before")
    @classmethod
    def _blank_team_id_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value!r}")
        return level

    @model_validator(mode="after")
    def _require_api_key(self) -> LinearSettings:
        if not self.api_key.strip():
            raise ValueError("LINEAR_API_KEY is required")
        return self


@dataclass(frozen=True, slots=True)
class ConfigResolution:
    """Outcome of resolving settings: exactly one of `settings` / `error` is set."""

    settings: LinearSettings | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.settings is not None


def _describe_validation_error(exc: ValidationError) -> str:
    messages: list[str] = []
    for item in exc.errors():
        location = ".".join(str(part) for part in item.get("loc", ()) if part != "__root__")
        message = str(item.get("msg", "invalid value"))
        # Model-level validators report "Value error, <message>".
        message = message.removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or str(exc)


def resolve_settings(
    *,
    api_key: str | None = None,
    team_id: str | None = None,
    env_file: Path | str | None = ".env",
    **overrides: Any,
) -> ConfigResolution:
    """Resolve settings, letting explicit flag values win over the environment.

    `overrides` are keyed by environment variable name (e.g. `LINEAR_TOP_LABELS`);
    `None` values are ignored so unset flags fall through to the environment.
    """

    init_kwargs: dict[str, Any] = {
        key: value for key, value in overrides.items() if value is not None
    }
    if api_key:
        init_kwargs["LINEAR_API_KEY"] = api_key
    if team_id:
        init_kwargs["LINEAR_TEAM_ID"] = team_id

    try:
        settings = LinearSettings(_env_file=env_file, **init_kwargs)
    except ValidationError as e:
        return ConfigResolution(error=_describe_validation_error(e))
    return ConfigResolution(settings=settings)
