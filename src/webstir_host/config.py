"""Configuration management for the Webstir hosts."""

from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


class LayoutConfig(BaseModel):
    """Workspace layout used by test discovery."""

    src_folder: str = "src"
    build_folder: str = "build"
    tests_folder: str = "tests"
    backend_folder: str = "backend"
    test_suffixes: list[str] = Field(default_factory=lambda: [".test.ts", ".test.js"])
    compiled_extension: str = ".js"
    excluded_directories: list[str] = Field(
        default_factory=lambda: ["node_modules", "build", "dist", ".git"]
    )


class LangfuseConfig(BaseModel):
    """Langfuse observability configuration."""

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None


class Config(BaseSettings):
    """Main configuration for the hosts."""

    model_config = SettingsConfigDict(
        env_prefix="WEBSTIR_",
        env_nested_delimiter="__",
    )

    # WEBSTIR_TEST_RUNTIME
    test_runtime: str | None = None

    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    langfuse: LangfuseConfig = Field(default_factory=LangfuseConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment wins over values read from the YAML file.
        return env_settings, init_settings, dotenv_settings, file_secret_settings


CONFIG_FILE_NAMES = ("webstir.yaml", "webstir.yml", ".webstir.yaml")


def load_config(workspace_root: Path | None = None) -> Config:
    """Load configuration from the workspace .env, YAML file and environment variables."""
    root = workspace_root or Path.cwd()
    load_dotenv(root / ".env")

    config_data: dict = {}
    for name in CONFIG_FILE_NAMES:
        config_path = root / name
        if not config_path.is_file():
            continue
        with open(config_path) as f:
            raw = yaml.safe_load(f)
        if raw and "webstir" in raw:
            config_data = raw["webstir"] or {}
        elif raw:
            config_data = raw
        break

    return Config(**config_data)
