from __future__ import annotations

import json
from pathlib import Path

import pytest

from adapters.filesystem.board_repository import FileSystemBoardRepository
from domain.models import BoardSnapshot, Connector, Point
from tests.helpers.board_fixtures import board_fixture_path, load_board_payload


def test_load_fixture_normalizes_store_format() -> None:
    snapshot = FileSystemBoardRepository().load(board_fixture_path("demo.json"))

    assert set(snapshot.connectors) == {"straight", "curved", "free", "loop", "legacy"}
    legacy = snapshot.connectors["legacy"]
    assert legacy.origin.item is not None
    assert (legacy.origin.item.item_id, legacy.origin.item.item_type) == ("s2", "sticky")
    assert legacy.destination.item is not None
    assert legacy.destination.item.item_type == "image"
    assert legacy.arrow_head == "none"
    assert snapshot.connectors["curved"].curve_control_point == Point(235, 40)
    assert snapshot.connectors["free"].destination.point == Point(400, 400)
    assert snapshot.is_selected("free")
    assert snapshot.find_item("sticky", "s1") is not None


def test_save_and_reload_keeps_connectors(tmp_path: Path, demo_board: BoardSnapshot) -> None:
    repo = FileSystemBoardRepository()
    target = tmp_path / "boards" / "copy.json"
    repo.save(demo_board, target)

    reloaded = repo.load(target)
    assert reloaded.connectors == demo_board.connectors
    assert reloaded.selected_connector_ids == demo_board.selected_connector_ids
    assert [item.id for item in reloaded.items] == [item.id for item in demo_board.items]


def test_load_all_with_paths_is_sorted(tmp_path: Path, demo_board: BoardSnapshot) -> None:
    repo = FileSystemBoardRepository()
    repo.save(demo_board, tmp_path / "b.json")
    repo.save(demo_board, tmp_path / "a.json")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    pairs = repo.load_all_with_paths(tmp_path)
    assert [path.name for path, _ in pairs] == ["a.json", "b.json"]


def test_non_object_payload_is_rejected(tmp_path: Path) -> None:
    target = tmp_path / "broken.json"
    target.write_text("[1, 2, 3]", encoding="utf-8")
    with pytest.raises(ValueError):
        FileSystemBoardRepository().load(target)


def test_malformed_connector_record_is_kept_raw(tmp_path: Path) -> None:
    payload = load_board_payload("demo.json")
    payload["connectors"]["bad"] = {"curveControlPoint": {"x": "left"}}
    source = tmp_path / "board.json"
    source.write_text(json.dumps(payload), encoding="utf-8")
    repo = FileSystemBoardRepository()

    snapshot = repo.load(source)
    assert isinstance(snapshot.connectors["straight"], Connector)
    assert snapshot.connectors["bad"] == {"id": "bad", "curveControlPoint": {"x": "left"}}

    repo.save(snapshot, tmp_path / "copy.json")
    reloaded = repo.load(tmp_path / "copy.json")
    assert reloaded.connectors["bad"] == snapshot.connectors["bad"]
