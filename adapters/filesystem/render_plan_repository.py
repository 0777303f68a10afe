from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from filelock import FileLock

from adapters.filesystem.json_utils import load_json, write_json_atomic
from domain.models import RenderPlan, RenderResult, RenderSkip
from domain.ports.repositories import RenderPlanRepository


def render_results_payload(results: Sequence[RenderResult]) -> dict[str, Any]:
    plans = [result.to_dict() for result in results if isinstance(result, RenderPlan)]
    skipped = [result.to_dict() for result in results if isinstance(result, RenderSkip)]
    return {"plans": plans, "skipped": skipped}


class FileSystemRenderPlanRepository(RenderPlanRepository):
    def load(self, path: Path) -> dict[str, Any]:
        return load_json(path)

    def save(self, results: Sequence[RenderResult], path: Path) -> None:
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        with FileLock(str(lock_path)):
            write_json_atomic(path, render_results_payload(results))

    def clear_cache(self, directory: Path) -> int:
        if not directory.exists():
            return 0
        removed = 0
        for path in directory.iterdir():
            if not path.is_file():
                continue
            if path.suffix.lower() in {".json", ".svg"} or path.name.endswith(".lock"):
                path.unlink()
                removed += 1
        return removed
