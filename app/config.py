from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from domain.models import (
    CURVE_HANDLE_FILL,
    DEFAULT_CONNECTOR_COLOR,
    SELECTION_COLOR,
    STICKY_BASE_SIZE,
)
from domain.services.bounds_calculator import HANDLE_SIZE, STROKE_WIDTH
from domain.services.compute_render_plan import RenderConfig

DEFAULT_CONFIG_PATH = Path("config/board/app.yaml")


class RenderSettings(BaseModel):
    selection_color: str = SELECTION_COLOR
    default_color: str = DEFAULT_CONNECTOR_COLOR
    curve_handle_fill: str = CURVE_HANDLE_FILL
    sticky_base_size: float = Field(default=STICKY_BASE_SIZE, gt=0)
    stroke_width: float = Field(default=STROKE_WIDTH, gt=0)
    handle_size: float = Field(default=HANDLE_SIZE, gt=0)

    @field_validator("selection_color", "default_color", "curve_handle_fill", mode="before")
    @classmethod
    def normalize_color(cls, value: object) -> str:
        text = str(value or "").strip()
        if not text:
            msg = "colors must be non-empty strings"
            raise ValueError(msg)
        return text

    def to_render_config(self) -> RenderConfig:
        return RenderConfig(
            stroke_width=self.stroke_width,
            handle_size=self.handle_size,
            selection_color=self.selection_color,
            curve_handle_fill=self.curve_handle_fill,
            endpoint_handle_fill=self.default_color,
        )


class LoggingSettings(BaseModel):
    level: str = "WARNING"

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, value: object) -> str:
        level = str(value or "WARNING").strip().upper()
        if level not in logging.getLevelNamesMapping():
            msg = f"Unknown log level: {value}"
            raise ValueError(msg)
        return level


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="WB_", env_nested_delimiter="__")

    title: str = "Board Connectors"
    output_dir: Path = Path("data/render_plans")
    render: RenderSettings = RenderSettings()
    logging: LoggingSettings = LoggingSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("WB_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
