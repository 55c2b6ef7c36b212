from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = ".newstube"
_DATA_DIR_RELATIVE_DEFAULTS: tuple[tuple[str, Path], ...] = (("log_dir", Path("logs")),)
_PATH_FIELDS: tuple[str, ...] = (
    "data_dir",
    *(field_name for field_name, _ in _DATA_DIR_RELATIVE_DEFAULTS),
)
_BOOLEAN_COERCION_FIELDS: tuple[str, ...] = ("telemetry_enabled",)


def _default_in_data_dir(relative_path: Path) -> Path:
    return Path(DEFAULT_DATA_DIR) / relative_path


def _resolve_path(value: str | Path) -> Path:
    return Path(value).expanduser().resolve()


def _parse_bool_with_default(value: Any, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        return default
    if not isinstance(value, str):
        return default

    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _normalize_optional_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    normalized = value.strip()
    return normalized or None


class BridgeSettings(BaseSettings):
    """
    Process-wide configuration for the extractor bridge.

    Options come from `NEWSTUBE_*` environment variables (or `.env`) and are
    read once at startup; the provider context built from them is shared
    read-only by every operation.
    """

    model_config = SettingsConfigDict(
        env_prefix="NEWSTUBE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Runtime paths.
    data_dir: Path = Field(
        default=Path(DEFAULT_DATA_DIR),
        description="Root runtime directory; logs live underneath unless overridden.",
    )
    log_dir: Path = Field(
        default=_default_in_data_dir(Path("logs")),
        description="Directory for log files. Defaults to `${NEWSTUBE_DATA_DIR}/logs`.",
    )
    log_level: str = Field(
        default="INFO",
        description="Console log level (stdout).",
    )

    # Provider library.
    provider_module: str | None = Field(
        default=None,
        description=(
            "Dotted import path of the provider library root. When unset, provider-backed "
            "methods fail with their category code."
        ),
    )
    provider_service: str = Field(
        default="YouTube",
        description="Service name looked up on the provider's service list.",
    )
    web_origin: str = Field(
        default="https://www.youtube.com",
        description="Origin used to canonicalize relative video and channel URLs.",
    )

    # Method defaults.
    default_prefer_lang: str = Field(
        default="pt",
        description="Caption language prefix used when getCaptions omits preferLang.",
    )
    default_channel_limit: int = Field(
        default=30,
        ge=1,
        description="Video cap used when getChannelVideos omits limit.",
    )
    error_message_max_length: int = Field(
        default=220,
        ge=16,
        description="Maximum length of failure messages returned to the caller.",
    )

    # Transport.
    http_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Downloader HTTP timeout. Unset keeps the HTTP client's own default.",
    )

    # Telemetry.
    telemetry_enabled: bool = Field(
        default=True,
        description="Enable lightweight internal telemetry events.",
    )
    telemetry_sink: Literal["none", "log"] = Field(
        default="log",
        description="`log` emits structured telemetry locally; `none` disables sink output.",
    )

    @field_validator("telemetry_sink", mode="before")
    @classmethod
    def _normalize_telemetry_sink(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("NEWSTUBE_TELEMETRY_SINK must be a string.")
        normalized = value.strip().lower()
        if normalized in {"none", "log"}:
            return normalized
        raise ValueError("NEWSTUBE_TELEMETRY_SINK must be set to: none, log.")

    @field_validator("web_origin", mode="before")
    @classmethod
    def _normalize_web_origin(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("NEWSTUBE_WEB_ORIGIN must be a string.")
        normalized = value.strip().rstrip("/")
        if not normalized.startswith(("http://", "https://")):
            raise ValueError("NEWSTUBE_WEB_ORIGIN must be an absolute http(s) origin.")
        return normalized

    @field_validator("provider_service", "default_prefer_lang", mode="before")
    @classmethod
    def _normalize_required_text(cls, value: Any, info: ValidationInfo) -> str:
        normalized = _normalize_optional_text(value)
        if normalized is None:
            raise ValueError(f"NEWSTUBE_{str(info.field_name).upper()} must not be empty.")
        return normalized

    @field_validator("provider_module", mode="before")
    @classmethod
    def _normalize_provider_module(cls, value: Any) -> str | None:
        return _normalize_optional_text(value)

    @field_validator(*_PATH_FIELDS, mode="before")
    @classmethod
    def _normalize_paths(cls, value: Any) -> Any:
        if value is None:
            return None
        return _resolve_path(value)

    @field_validator(*_BOOLEAN_COERCION_FIELDS, mode="before")
    @classmethod
    def _normalize_booleans(cls, value: Any, info: ValidationInfo) -> bool:
        field_name = info.field_name
        assert field_name is not None
        default_value = cls.model_fields[field_name].default
        assert isinstance(default_value, bool)
        return _parse_bool_with_default(value, default=default_value)


def _apply_path_defaults(settings: BridgeSettings) -> BridgeSettings:
    updates: dict[str, Path] = {}
    for field_name, relative_default in _DATA_DIR_RELATIVE_DEFAULTS:
        if field_name in settings.model_fields_set:
            continue
        updates[field_name] = settings.data_dir / relative_default
    if not updates:
        return settings
    return settings.model_copy(update=updates)


def _resolve_path_fields(settings: BridgeSettings) -> BridgeSettings:
    resolved_updates = {
        field_name: _resolve_path(getattr(settings, field_name)) for field_name in _PATH_FIELDS
    }
    return settings.model_copy(update=resolved_updates)


def load_settings() -> BridgeSettings:
    settings = BridgeSettings()
    settings = _apply_path_defaults(settings)
    return _resolve_path_fields(settings)
