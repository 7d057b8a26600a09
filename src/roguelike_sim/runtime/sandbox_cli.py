"""Command-line front-end for the sandbox session."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from roguelike_sim.content import ContentError
from roguelike_sim.runtime.sandbox import SimSandbox
from roguelike_sim.runtime.snapshot import load_snapshot, restore_game


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Step the city sim sandbox for a number of turns")
    parser.add_argument("--content-root", type=Path, default=Path("."), help="Directory holding content/")
    parser.add_argument("--state", type=Path, help="Resume from an exported state snapshot")
    parser.add_argument("--turns", type=int, default=10, help="Number of turns to run")
    parser.add_argument("--export", type=Path, help="Write the final state snapshot here")
    parser.add_argument(
        "--city",
        action="append",
        default=[],
        metavar="LABEL:POPULATION",
        help="Add a city before running (repeatable)",
    )
    parser.add_argument(
        "--assign",
        action="append",
        default=[],
        metavar="CITY_INDEX:ROLE:WORKERS",
        help="Assign workers to a role in a city (repeatable)",
    )
    parser.add_argument(
        "--build",
        action="append",
        default=[],
        metavar="CITY_INDEX:BUILDING",
        help="Place a building in a city (repeatable)",
    )
    return parser


def _split(parser: argparse.ArgumentParser, raw: str, parts: int, flag: str) -> list[str]:
    pieces = raw.split(":")
    if len(pieces) != parts or not all(pieces):
        parser.error(f"{flag} expects {parts} ':'-separated fields, got {raw!r}")
    return pieces


def _as_int(parser: argparse.ArgumentParser, raw: str, flag: str) -> int:
    try:
        return int(raw)
    except ValueError:
        parser.error(f"{flag} expects an integer, got {raw!r}")


def _city_id(parser: argparse.ArgumentParser, sandbox: SimSandbox, raw: str, flag: str) -> str:
    index = _as_int(parser, raw, flag)
    if not 0 <= index < len(sandbox.state.cities):
        parser.error(f"{flag} refers to unknown city index {index}")
    return sandbox.state.cities[index].id


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.turns < 0:
        parser.error("--turns must be non-negative")

    sandbox = SimSandbox()
    if args.state is not None:
        try:
            sandbox = SimSandbox(state=restore_game(load_snapshot(args.state)))
        except (OSError, ValueError) as exc:
            parser.error(f"cannot resume from {args.state}: {exc}")

    try:
        sandbox.load_content(args.content_root)
    except ContentError as exc:
        parser.error(str(exc))
    if sandbox.event_ring is not None:
        for event in sandbox.event_ring.of_type("CONTENT_MISSING"):
            print(f"Not found: {event['path']}")

    for raw in args.city:
        label, population = _split(parser, raw, 2, "--city")
        sandbox.add_city(label=label, population=_as_int(parser, population, "--city"))
    for raw in args.build:
        city_index, building_id = _split(parser, raw, 2, "--build")
        sandbox.add_building(_city_id(parser, sandbox, city_index, "--build"), building_id)
    for raw in args.assign:
        city_index, role_id, workers = _split(parser, raw, 3, "--assign")
        sandbox.add_role_assignment(
            _city_id(parser, sandbox, city_index, "--assign"), role_id, _as_int(parser, workers, "--assign")
        )

    try:
        sandbox.run(args.turns)
    except ContentError as exc:
        parser.error(str(exc))

    print("Resources")
    for line in sandbox.resources_view():
        print(f"  {line}")
    print(sandbox.status_line())

    if args.export is not None:
        digest = sandbox.export_state(args.export)
        print(f"Exported state to {args.export} (sha256 {digest[:12]})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
