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

from reconcipy.app import (
    apply_resource,
    delete_resource,
    describe_state,
    import_resource,
    plan_resource,
    publish_resource,
    read_resource,
    wait_for_resource,
)
from reconcipy.common import configure_logging
from reconcipy.config import ConfigurationError
from reconcipy.domain.errors import ReconcileError
from reconcipy.domain.model import EDGE_FUNCTION, KINDS, get_kind
from reconcipy.domain.ports import CallOptions
from reconcipy.ui.descriptor_file import load_descriptor
from reconcipy.waiters import WaitPolicy

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from reconcipy.domain.model import ResourceKind
    from reconcipy.domain.reconciliation import ReconcilePlan

log = logging.getLogger(__name__)


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Not a number: {value}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"Must be positive: {value}")
    return parsed


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile remote resources")
    parser.add_argument(
        "--kind",
        choices=sorted(KINDS),
        default=EDGE_FUNCTION.name,
        help="Resource kind to operate on (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level name (default: %(default)s)",
    )
    parser.add_argument(
        "--call-timeout",
        type=_positive_float,
        help="Per-call timeout in seconds (defaults to the client timeout)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    read = subparsers.add_parser("read", help="Show the reconciled view of a resource")
    read.add_argument("key", help="Natural key, e.g. NAME or CLUSTER:PROFILE")

    import_ = subparsers.add_parser("import", help="Adopt an existing resource by key")
    import_.add_argument("key", help="Natural key, e.g. NAME or CLUSTER:PROFILE")

    plan = subparsers.add_parser("plan", help="Show what apply would change")
    plan.add_argument("descriptor", type=Path, help="JSON descriptor file")

    apply = subparsers.add_parser("apply", help="Create or update a resource to match a file")
    apply.add_argument("descriptor", type=Path, help="JSON descriptor file")

    publish = subparsers.add_parser("publish", help="Promote the draft stage to live")
    publish.add_argument("key", help="Natural key")

    delete = subparsers.add_parser("delete", help="Delete a resource (no-op when missing)")
    delete.add_argument("key", help="Natural key")

    wait = subparsers.add_parser("wait", help="Poll until a resource settles")
    wait.add_argument("key", help="Natural key")
    wait.add_argument(
        "--status",
        action="append",
        default=[],
        help="Target status; may be given more than once",
    )
    wait.add_argument(
        "--pending",
        action="append",
        default=[],
        help="Status that keeps the wait going; anything else fails immediately",
    )
    wait.add_argument(
        "--absent",
        action="store_true",
        help="Wait for the resource to disappear instead of reaching a status",
    )
    wait.add_argument(
        "--timeout",
        type=_positive_float,
        default=WaitPolicy().timeout_seconds,
        help="Give up after this many seconds (default: %(default)s)",
    )
    wait.add_argument(
        "--interval",
        type=_positive_float,
        default=WaitPolicy().poll_interval_seconds,
        help="Seconds between polls (default: %(default)s)",
    )

    return parser.parse_args(list(argv))


def _describe_plan(plan: ReconcilePlan) -> dict[str, object]:
    return {
        "action": plan.action.value,
        "changed": sorted(plan.changed),
        "associations_added": sorted(plan.associations.added),
        "associations_removed": sorted(plan.associations.removed),
        "publish": plan.publish,
    }


def _emit(document: dict[str, object]) -> None:
    print(json.dumps(document, indent=2, sort_keys=True))


def _run(args: argparse.Namespace, kind: ResourceKind, options: CallOptions) -> None:
    if args.command == "read":
        _emit(describe_state(kind, read_resource(kind, args.key, options=options)))
    elif args.command == "import":
        _emit(describe_state(kind, import_resource(kind, args.key, options=options)))
    elif args.command == "plan":
        descriptor = load_descriptor(args.descriptor, kind)
        state, plan = plan_resource(kind, descriptor, options=options)
        _emit({"current": describe_state(kind, state), "plan": _describe_plan(plan)})
    elif args.command == "apply":
        descriptor = load_descriptor(args.descriptor, kind)
        _emit(describe_state(kind, apply_resource(kind, descriptor, options=options)))
    elif args.command == "publish":
        _emit(describe_state(kind, publish_resource(kind, args.key, options=options)))
    elif args.command == "delete":
        _emit(describe_state(kind, delete_resource(kind, args.key, options=options)))
    elif args.command == "wait":
        state = wait_for_resource(
            kind,
            args.key,
            target=args.status,
            pending=args.pending,
            until_absent=args.absent,
            policy=WaitPolicy(timeout_seconds=args.timeout, poll_interval_seconds=args.interval),
            options=options,
        )
        _emit(describe_state(kind, state))
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    try:
        configure_logging(level=parsed_args.log_level)
        kind = get_kind(parsed_args.kind)
        if parsed_args.command == "wait" and not parsed_args.absent and not parsed_args.status:
            raise ValueError("wait needs --status or --absent")  # noqa: TRY301
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    options = CallOptions(timeout_seconds=parsed_args.call_timeout)
    try:
        _run(parsed_args, kind, options)
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except ReconcileError as exc:
        log.error("%s failed (%s): %s", parsed_args.command, exc.kind, exc)  # noqa: TRY400
        if exc.state is not None:
            _emit(describe_state(kind, exc.state))
        sys.exit(1)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()
