"""Configuration models and loading logic."""

from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_SETTINGS_FILE = Path("configs/settings.yaml")
SETTINGS_FILE_ENV = "OUTPUT_GOVERNANCE_SETTINGS_FILE"


class ProjectConfig(BaseModel):
    """Project metadata settings."""

    name: str = "output_governance"
    env: str = "dev"


class PathsConfig(BaseModel):
    """Filesystem paths used by the CLI."""

    logs_root: Path = Path("./logs")

    def resolved(self, project_root: Path) -> "PathsConfig":
        """Return a copy with project-relative paths resolved to absolute paths."""

        updates: dict[str, Path] = {}
        for field_name in type(self).model_fields:
            value = getattr(self, field_name)
            updates[field_name] = value if value.is_absolute() else (project_root / value).resolve()
        return self.model_copy(update=updates)


class LoggingConfig(BaseModel):
    """Log level and destination for CLI runs."""

    level: str = "INFO"
    file_name: str = "output_governance.log"
    console: bool = True


class PixelFormatReplacement(BaseModel):
    """Sanctioned pixel format and colour range for one deprecated format."""

    pix_fmt: str
    color_range: str = "pc"


def _default_replacements() -> dict[str, PixelFormatReplacement]:
    return {
        "yuvj420p": PixelFormatReplacement(pix_fmt="yuv420p"),
        "yuvj422p": PixelFormatReplacement(pix_fmt="yuv422p"),
        "yuvj444p": PixelFormatReplacement(pix_fmt="yuv444p"),
        "yuvj440p": PixelFormatReplacement(pix_fmt="yuv440p"),
    }


class GovernanceConfig(BaseModel):
    """Encoder argument governance rules."""

    image_formats: list[str] = Field(
        default_factory=lambda: [
            "jpg",
            "jpeg",
            "png",
            "bmp",
            "tiff",
            "tif",
            "webp",
            "gif",
            "ppm",
            "pgm",
            "pbm",
            "pam",
        ],
        min_length=1,
    )
    deprecated_pixel_formats: dict[str, PixelFormatReplacement] = Field(default_factory=_default_replacements)
    standard_pixel_format: str = "yuv420p"
    standard_color_range: str = "pc"
    scale_filter: str = "scale=in_range=pc:out_range=pc"
    frame_limit_flag: str = "-frames:v"
    frame_limit_aliases: list[str] = Field(default_factory=lambda: ["-frames:v", "-vframes", "-frames"])
    sequence_digits: int = Field(default=4, ge=1, le=9)

    def replacement_for(self, pix_fmt: str) -> PixelFormatReplacement | None:
        """Return the sanctioned replacement for a deprecated pixel format, if any."""

        return self.deprecated_pixel_formats.get(pix_fmt.strip().lower())


class PackagingConfig(BaseModel):
    """Archive-format contract and canonical structure naming."""

    plain_extension: str = ".tar"
    governed_extension: str = ".tra"
    # Longest suffix first: ".tar.gz" must win over ".gz".
    forbidden_extensions: list[str] = Field(default_factory=lambda: [".tar.gz", ".tgz", ".zip", ".gz"])
    manifest_file: str = "manifest.json"
    artifacts_dir: str = "artifacts"
    preview_prefix: str = "preview"
    platform: str = "ConvertX-CN"
    manifest_version: str = "1.0.0"
    staging_prefix: str = "_package_staging_"
    job_archive_prefix: str = "converted_files_"


DEFAULT_GOVERNANCE = GovernanceConfig()
DEFAULT_PACKAGING = PackagingConfig()


class AppSettings(BaseSettings):
    """Top-level application settings."""

    _yaml_file_override: ClassVar[Path | None] = None

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    governance: GovernanceConfig = Field(default_factory=GovernanceConfig)
    packaging: PackagingConfig = Field(default_factory=PackagingConfig)

    model_config = SettingsConfigDict(
        env_prefix="OUTPUT_GOVERNANCE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Use YAML defaults while allowing env vars to override values."""

        yaml_file = resolve_settings_file(cls._yaml_file_override)
        yaml_settings = YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            yaml_settings,
            file_secret_settings,
        )

    def as_dict(self) -> dict[str, object]:
        """Return settings as a standard nested dictionary."""

        return self.model_dump(mode="json")


def find_project_root(start: Path | None = None) -> Path:
    """Locate the project root by traversing upward for config markers."""

    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / "configs/settings.yaml").exists():
            return candidate
    return current


def resolve_settings_file(override: Path | None = None) -> Path:
    """Resolve settings file from explicit override, env var, or default."""

    chosen = override
    if chosen is None:
        env_value = os.getenv(SETTINGS_FILE_ENV)
        if env_value:
            chosen = Path(env_value)
    if chosen is None:
        chosen = DEFAULT_SETTINGS_FILE

    if not chosen.is_absolute():
        chosen = (find_project_root() / chosen).resolve()
    return chosen


def load_settings(config_file: Path | None = None) -> AppSettings:
    """Load settings with YAML defaults and environment variable overrides."""

    settings_file = resolve_settings_file(config_file)
    project_root = settings_file.parent.parent.resolve()
    AppSettings._yaml_file_override = settings_file
    try:
        settings = AppSettings()
    finally:
        AppSettings._yaml_file_override = None
    resolved_paths = settings.paths.resolved(project_root=project_root)
    return settings.model_copy(update={"paths": resolved_paths})
