# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from taxonomist.app import add_region, import_structure, list_regions, load_payload, review_import
from taxonomist.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from taxonomist.domain.model import StructureEntity, StructureTree

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile imported taxonomy structures")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    regions = subparsers.add_parser("regions", help="List catalog regions")
    regions.add_argument(
        "--add",
        type=str,
        metavar="NAME",
        help="Register a region in the local SQL catalog first",
    )

    review = subparsers.add_parser("review", help="Show the annotated structure of an import")
    review.add_argument("payload", type=Path, help="Path to the parsed question-bank JSON")

    run = subparsers.add_parser("import", help="Create missing structure for an import")
    run.add_argument("payload", type=Path, help="Path to the parsed question-bank JSON")
    run.add_argument(
        "--region",
        type=str,
        help="Region name for the data structure (defaults to the preferred region)",
    )
    run.add_argument(
        "--rollback-on-failure",
        action="store_true",
        help="Delete everything created by this run unless it fully resolves",
    )

    return parser.parse_args(list(argv))


def _describe(node: StructureEntity) -> str:
    status = "exists" if node.exists else "missing"
    parts = [f"{node.kind}: {node.canonical_name}"]
    if node.code:
        parts.append(f"[{node.code}]")
    parts.append(f"({status})")
    if node.creation_error:
        parts.append(f"error: {node.creation_error}")
    if node.potential_duplicates:
        names = ", ".join(candidate.name for candidate in node.potential_duplicates)
        parts.append(f"similar: {names}")
    return " ".join(parts)


def render_tree(tree: StructureTree) -> list[str]:
    lines: list[str] = []
    for node in tree.walk():
        lines.append("  " * node.kind.depth + _describe(node))
    return lines


def _load(path: Path) -> object:
    try:
        return load_payload(path)
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Cannot read payload {path}: {exc}") from exc


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        payload = _load(parsed_args.payload) if parsed_args.command != "regions" else None
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "regions":
            if parsed_args.add:
                add_region(parsed_args.add)
            for region in list_regions():
                print(f"{region.id}  {region.name}")
        elif parsed_args.command == "review":
            session = review_import(payload)
            if session.tree is not None:
                print("\n".join(render_tree(session.tree)))
            if session.offline:
                print("Catalog offline: every node is shown as missing")
        elif parsed_args.command == "import":
            outcome = import_structure(
                payload,
                region_name=parsed_args.region,
                rollback_on_failure=parsed_args.rollback_on_failure,
            )
            report = outcome.report
            print(
                f"created={report.created} failed={report.failed} skipped={report.skipped} "
                f"state={outcome.session.state}"
            )
            if outcome.data_structure is not None:
                print(f"data_structure={outcome.data_structure.data_structure_id}")
            elif outcome.session.data_structure_error:
                print(f"data structure not resolved: {outcome.session.data_structure_error}")
            if outcome.rollback is not None:
                print(
                    f"rolled back: deleted={outcome.rollback.succeeded} "
                    f"failed={outcome.rollback.failed}"
                )
            if not outcome.session.all_resolved:
                sys.exit(1)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
