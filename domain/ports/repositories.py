from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from domain.models import BoardSnapshot, RenderResult


class BoardRepository(Protocol):
    def load(self, path: Path) -> BoardSnapshot: ...

    def load_all_with_paths(self, directory: Path) -> Sequence[tuple[Path, BoardSnapshot]]: ...

    def save(self, snapshot: BoardSnapshot, path: Path) -> None: ...


class RenderPlanRepository(Protocol):
    def load(self, path: Path) -> dict[str, Any]: ...

    def save(self, results: Sequence[RenderResult], path: Path) -> None: ...
