"""
app/main.py

Command-line entry point for the event service.

    python -m app.main sports
    python -m app.main events football --locale en
    python -m app.main build football total_goals --param direction=under --param threshold=3.5
    python -m app.main test-expression "totalGoals > 2.5" --sport football
    python -m app.main correct football --match match.json --prediction prediction.json

Output is JSON on stdout. Exit code 1 on a rejected request.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from app.config import load_config, log_config_snapshot
from app.service import EventService, create_service
from events.errors import EventError, ParameterValidationError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sport-events",
        description="Inspect, build and correct sports prediction events.",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        required=True,
    )

    subparsers.add_parser("sports", help="List configured sports.")

    events = subparsers.add_parser("events", help="List the events of a sport.")
    events.add_argument("sport")
    events.add_argument("--locale", help="Label locale ('fr' or 'en').")
    events.add_argument(
        "--by-category",
        action="store_true",
        help="Group events under their categories.",
    )

    build = subparsers.add_parser("build", help="Materialize an event.")
    build.add_argument("sport")
    build.add_argument("event_id")
    build.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Parameter value; repeat for several parameters.",
    )
    build.add_argument("--locale")

    test = subparsers.add_parser(
        "test-expression",
        help="Evaluate an expression against a built-in sample match.",
    )
    test.add_argument("expression")
    test.add_argument("--sport", default="football")

    correct = subparsers.add_parser(
        "correct",
        help="Correct a prediction (or a list of predictions) against a match.",
    )
    correct.add_argument("sport")
    correct.add_argument("--match", required=True, help="Match JSON file, or '-' for stdin.")
    correct.add_argument("--prediction", required=True, help="Prediction JSON file (object or list).")
    correct.add_argument("--locale")

    return parser


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_json(path: Optional[str]) -> Any:
    """
    Load JSON from a file or stdin.
    """
    if not path or path == "-":
        raw = sys.stdin.read()
    else:
        raw = Path(path).read_text(encoding="utf-8")

    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Error: invalid JSON input ({exc}).") from exc


def parse_params(pairs: list[str]) -> Dict[str, Any]:
    """NAME=VALUE pairs; values that parse as JSON (numbers) are decoded."""
    params: Dict[str, Any] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise SystemExit(f"Error: expected NAME=VALUE, got '{pair}'.")
        try:
            params[name] = json.loads(value)
        except json.JSONDecodeError:
            params[name] = value
    return params


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def _error_payload(error: EventError) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"error": error.message, "code": error.code}
    if isinstance(error, ParameterValidationError):
        payload["details"] = [
            {"field": e.field_name, "code": e.code, "message": e.message} for e in error.errors
        ]
    return payload


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_sports(service: EventService, args: argparse.Namespace) -> int:
    _emit({"sports": service.configured_sports()})
    return 0


def _cmd_events(service: EventService, args: argparse.Namespace) -> int:
    if args.by_category:
        _emit(service.get_events_by_category(args.sport, args.locale))
    else:
        _emit(service.get_events(args.sport, args.locale))
    return 0


def _cmd_build(service: EventService, args: argparse.Namespace) -> int:
    result = service.build_event(args.sport, args.event_id, parse_params(args.param), args.locale)
    _emit(result.to_dict())
    return 0


def _cmd_test_expression(service: EventService, args: argparse.Namespace) -> int:
    result = service.test_expression(args.expression, args.sport)
    _emit(result.to_dict())
    return 0 if result.success else 1


def _cmd_correct(service: EventService, args: argparse.Namespace) -> int:
    match = _load_json(args.match)
    prediction = _load_json(args.prediction)
    if isinstance(prediction, list):
        _emit(service.correct_multiple(prediction, match, args.sport, args.locale).to_dict())
    else:
        _emit(service.correct_prediction(prediction, match, args.sport, args.locale).to_dict())
    return 0


COMMANDS = {
    "sports": _cmd_sports,
    "events": _cmd_events,
    "build": _cmd_build,
    "test-expression": _cmd_test_expression,
    "correct": _cmd_correct,
}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None, service: Optional[EventService] = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    if service is None:
        config = load_config(fail_fast=False)
        logging.basicConfig(
            level=getattr(logging, config.log_level, logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            stream=sys.stderr,
        )
        log_config_snapshot(config)
        service = create_service(config)

    try:
        return COMMANDS[args.command](service, args)
    except EventError as e:
        logger.info("Request rejected: %s", e.message)
        _emit(_error_payload(e))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
