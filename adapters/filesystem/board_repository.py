from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from adapters.filesystem.json_utils import load_json, write_json_atomic
from domain.models import BoardSnapshot, Connector
from domain.ports.repositories import BoardRepository


class FileSystemBoardRepository(BoardRepository):
    def load(self, path: Path) -> BoardSnapshot:
        return BoardSnapshot.model_validate(load_json(path))

    def load_all_with_paths(self, directory: Path) -> list[tuple[Path, BoardSnapshot]]:
        return [(path, self.load(path)) for path in sorted(self._iter_paths(directory))]

    def save(self, snapshot: BoardSnapshot, path: Path) -> None:
        payload = snapshot.model_dump(mode="json", exclude={"connectors"})
        # Malformed records are written back untouched.
        payload["connectors"] = {
            connector_id: (
                connector.to_store_dict() if isinstance(connector, Connector) else connector
            )
            for connector_id, connector in snapshot.connectors.items()
        }
        write_json_atomic(path, payload)

    def _iter_paths(self, directory: Path) -> Iterable[Path]:
        yield from directory.glob("*.json")
