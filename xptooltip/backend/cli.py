"""Command line entry point: serve the overlay API or estimate one group offline."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from xptooltip.backend.config import OverlaySettings, load_settings
from xptooltip.backend.display import format_xp
from xptooltip.backend.engine import estimate_group
from xptooltip.backend.errors import EstimationError
from xptooltip.backend.payloads import parse_actor, parse_player
from xptooltip.backend.reference import reference_xp
from xptooltip.backend.registry import MonsterGroupActor

log = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="xptooltip", description="Monster group XP tooltip backend")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="run the overlay API")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)

    estimate_parser = subparsers.add_parser("estimate", help="estimate XP for a group described in a JSON file")
    estimate_parser.add_argument("path", type=Path)
    return parser.parse_args(argv)


def configure_logging(settings: OverlaySettings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def serve(settings: OverlaySettings, host: str | None, port: int | None) -> int:
    import uvicorn

    from xptooltip.backend.api import create_app

    uvicorn.run(create_app(settings=settings), host=host or settings.host, port=port or settings.port)
    return 0


def estimate(settings: OverlaySettings, path: Path) -> int:
    document = json.loads(path.read_text(encoding="utf-8"))
    try:
        player = parse_player(document["player"])
        actor = parse_actor(document["group"])
        if not isinstance(actor, MonsterGroupActor):
            print(f"Actor {actor.contextual_id} is not a monster group ({actor.kind})", file=sys.stderr)
            return 1
        result = estimate_group(actor.group, player)
        reference = reference_xp(player, actor.group)
    except KeyError as exc:
        print(f"Missing section in {path}: {exc}", file=sys.stderr)
        return 1
    except EstimationError as exc:
        log.error("Estimate failed: %s", exc)
        print(f"Cannot estimate XP: {exc}", file=sys.stderr)
        return 1

    separator = settings.thousands_separator
    print(f"Group level {result.group_level} ({result.star_rating.yellow} yellow, {result.star_rating.red} red stars)")
    print(f"Solo: {format_xp(result.solo_xp, separator)} XP")
    if result.party_xp is not None:
        print(f"Party: {format_xp(result.party_xp, separator)} XP")
    print(f"Reference formula: {format_xp(reference, separator)} XP")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    configure_logging(settings)
    if args.command == "serve":
        return serve(settings, host=args.host, port=args.port)
    return estimate(settings, path=args.path)


if __name__ == "__main__":
    raise SystemExit(main())
