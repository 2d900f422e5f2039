from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from kasten.domain.constants import DEFAULT_SESSION_LIMIT


class AppConfig(BaseSettings):
    """
    Configuration model for kasten.
    Supports loading from:
    1. Environment variables (KASTEN_*)
    2. Config file (~/.config/kasten/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="KASTEN_",
        extra="ignore",
    )

    # Paths
    deck_file: Path = Field(default_factory=lambda: Path.cwd() / "deck.yaml")

    # Practice
    session_limit: int = Field(default=DEFAULT_SESSION_LIMIT, ge=1)

    # 0 = warnings only, 1 = info, 2+ = debug
    verbose: int = Field(default=1, ge=0)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        toml_files = [
            Path.home() / ".config/kasten/config.toml",
            Path.home() / ".kasten.toml",
        ]
        toml_file = next((f for f in toml_files if f.exists()), None)

        # Later sources lose: CLI overrides beat env vars, which beat the file.
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("deck_file", mode="before")
    @classmethod
    def resolve_path(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/kasten/config.toml (if exists)
    3. Environment variables (KASTEN_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
