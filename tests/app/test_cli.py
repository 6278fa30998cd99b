from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from taxonomist.adapters.sqlalchemy import SqlAlchemyCatalogStore, configured_engine
from taxonomist.domain.model import EntityKind
from taxonomist.domain.reconciliation import CatalogIndex, build_structure_tree
from taxonomist.ui import cli

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _local_catalog(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("TAXONOMIST_CATALOG_URL", raising=False)
    monkeypatch.delenv("TAXONOMIST_DEFAULT_REGION", raising=False)
    monkeypatch.setenv("DATABASE_URI", f"sqlite+pysqlite:///{tmp_path / 'catalog.db'}")


@pytest.fixture
def payload_file(tmp_path: Path, physics_payload: dict[str, object]) -> Path:
    path = tmp_path / "physics.json"
    path.write_text(json.dumps(physics_payload), encoding="utf-8")
    return path


def test_regions_add_and_list(capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["regions", "--add", "Middle East"])
    cli.main(["regions"])

    lines = [line for line in capsys.readouterr().out.splitlines() if line]
    assert len(lines) == 2
    assert all(line.endswith("Middle East") for line in lines)


def test_review_prints_annotated_tree(
    payload_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.main(["review", str(payload_file)])

    out = capsys.readouterr().out.splitlines()
    assert out[0] == "program: IGCSE (missing)"
    assert out[2] == "    subject: Physics [0625] (missing)"
    assert out[5].startswith("          subtopic: Motion")
    snapshot = SqlAlchemyCatalogStore(configured_engine()).load_snapshot()
    assert all(snapshot.of_kind(kind) == () for kind in EntityKind)


def test_import_creates_structure_and_data_structure(
    payload_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.main(["regions", "--add", "Middle East"])
    capsys.readouterr()

    cli.main(["import", str(payload_file), "--region", "middle"])

    out = capsys.readouterr().out
    assert "created=6 failed=0 skipped=0 state=committed" in out
    assert "data_structure=" in out


def test_second_import_creates_nothing(
    payload_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.main(["regions", "--add", "Middle East"])
    cli.main(["import", str(payload_file)])
    first = capsys.readouterr().out.splitlines()[-1]

    cli.main(["import", str(payload_file)])

    out = capsys.readouterr().out.splitlines()
    assert out[0].startswith("created=0 failed=0 skipped=0")
    assert out[-1] == first


def test_import_without_region_exits_with_failure(
    payload_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["import", str(payload_file)])

    assert exc.value.code == 1
    assert "data structure not resolved" in capsys.readouterr().out


def test_import_rolls_back_when_requested(payload_file: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["import", str(payload_file), "--rollback-on-failure"])

    assert exc.value.code == 1
    snapshot = SqlAlchemyCatalogStore(configured_engine()).load_snapshot()
    assert all(snapshot.of_kind(kind) == () for kind in EntityKind)


def test_unknown_region_is_fatal(payload_file: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["import", str(payload_file), "--region", "Antarctica"])

    assert exc.value.code == 1


def test_unreadable_payload_exits_with_validation_error(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        cli.main(["review", str(broken)])

    assert exc.value.code == 2


def test_render_tree_indents_by_level(physics_payload: dict[str, object]) -> None:
    tree = build_structure_tree(physics_payload, CatalogIndex.empty())
    tree.nodes_of_kind(EntityKind.TOPIC)[0].creation_error = "rejected"

    lines = cli.render_tree(tree)

    assert lines[1] == "  provider: Cambridge International (CIE) (missing)"
    assert lines[3] == "      unit: All Topics (missing)"
    assert lines[4] == "        topic: Forces (missing) error: rejected"
