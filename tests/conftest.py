from __future__ import annotations

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from app.config import AppSettings, LoggingSettings, RenderSettings
from domain.models import BoardSnapshot
from tests.helpers.board_fixtures import load_board_fixture


def _clear_wb_env() -> None:
    for key in list(os.environ):
        if key.startswith("WB_"):
            os.environ.pop(key, None)


_clear_wb_env()


@pytest.fixture(autouse=True)
def clear_wb_env() -> Generator[None, None, None]:
    _clear_wb_env()
    yield
    _clear_wb_env()


@pytest.fixture
def render_settings() -> RenderSettings:
    return RenderSettings()


@pytest.fixture
def app_settings(tmp_path: Path, render_settings: RenderSettings) -> AppSettings:
    return AppSettings(
        title="Test Board",
        output_dir=tmp_path / "render_plans",
        render=render_settings,
        logging=LoggingSettings(level="DEBUG"),
    )


@pytest.fixture
def app_settings_factory(app_settings: AppSettings) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        return app_settings.model_copy(update=overrides)

    return _factory


@pytest.fixture
def demo_board() -> BoardSnapshot:
    return load_board_fixture("demo.json")
