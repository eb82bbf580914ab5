from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from datetime import timedelta
from typing import Any

from adapters.time import SystemSleeperPort
from domain.timer import TimerClient, format_duration, parse_duration
from rich.console import Console
from shared.config.loader import load_timerctl_settings
from shared.errors import TimerClientError

from apps.timerctl.compose import build_client
from apps.timerctl.demo import render_snapshot, run_demo

# CLI verb -> TimerClient method
CONTROL_VERBS: dict[str, str] = {
    "start-timer": "start_timer",
    "start-or-split": "start_or_split",
    "split": "split",
    "unsplit": "unsplit",
    "skip-split": "skip_split",
    "pause": "pause",
    "resume": "resume",
    "reset": "reset",
    "init-game-time": "init_game_time",
    "pause-game-time": "pause_game_time",
    "unpause-game-time": "unpause_game_time",
}
DURATION_VERBS: dict[str, str] = {
    "set-game-time": "set_game_time",
    "set-loading-times": "set_loading_times",
}
QUERY_VERBS: dict[str, str] = {
    "get-last-split-time": "get_last_split_time",
    "get-comparison-split-time": "get_comparison_split_time",
    "get-current-time": "get_current_time",
    "get-best-possible-time": "get_best_possible_time",
    "get-split-index": "get_split_index",
    "get-current-split-name": "get_current_split_name",
    "get-previous-split-name": "get_previous_split_name",
    "get-current-timer-phase": "get_current_timer_phase",
}
COMPARISON_QUERY_VERBS: dict[str, str] = {
    "get-delta": "get_delta",
    "get-final-time": "get_final_time",
    "get-predicted-time": "get_predicted_time",
}


def _duration_arg(text: str) -> timedelta:
    try:
        return parse_duration(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="timerctl", description="Drive a LiveSplit Server timer.")
    ap.add_argument("--profile", help="Config profile name (configs/profiles/<name>.toml).")
    ap.add_argument("--transport", choices=["tcp", "pipe"], help="Override the transport.")
    ap.add_argument("--host", help="Override the TCP host.")
    ap.add_argument("--port", type=int, help="Override the TCP port.")
    ap.add_argument("--pipe-path", help="Override the named pipe / socket path.")
    ap.add_argument("--timeout", type=float, help="Per-operation deadline in seconds.")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")

    sub = ap.add_subparsers(dest="verb", required=True, metavar="VERB")
    for verb in CONTROL_VERBS:
        sub.add_parser(verb)
    for verb in DURATION_VERBS:
        p = sub.add_parser(verb)
        p.add_argument("duration", type=_duration_arg, help="e.g. 12.5, 01:02.34, 1:00:00")
    p = sub.add_parser("set-comparison")
    p.add_argument("comparison", help='Comparison name, e.g. "Personal Best".')
    for verb in QUERY_VERBS:
        sub.add_parser(verb)
    for verb in COMPARISON_QUERY_VERBS:
        p = sub.add_parser(verb)
        p.add_argument("--comparison", default=None)

    demo = sub.add_parser("demo", help="Reset, start and split every interval until the run ends.")
    demo.add_argument("--interval", type=float, default=None, help="Seconds between splits.")
    demo.add_argument("--comparison", default=None)
    demo.add_argument("--max-splits", type=int, default=None)
    return ap


def _client_overrides(args: argparse.Namespace) -> dict[str, Any]:
    pairs = {
        "transport": args.transport,
        "host": args.host,
        "port": args.port,
        "pipe_path": args.pipe_path,
        "timeout_s": args.timeout,
    }
    return {k: v for k, v in pairs.items() if v is not None}


def _render(value: Any) -> str:
    if isinstance(value, timedelta):
        return format_duration(value)
    return str(value)


def _dispatch(client: TimerClient, args: argparse.Namespace, console: Console) -> None:
    verb = args.verb
    if verb in CONTROL_VERBS:
        getattr(client, CONTROL_VERBS[verb])()
    elif verb in DURATION_VERBS:
        getattr(client, DURATION_VERBS[verb])(args.duration)
    elif verb == "set-comparison":
        client.set_comparison(args.comparison)
    elif verb in QUERY_VERBS:
        console.print(_render(getattr(client, QUERY_VERBS[verb])()), markup=False)
    elif verb in COMPARISON_QUERY_VERBS:
        method = getattr(client, COMPARISON_QUERY_VERBS[verb])
        console.print(_render(method(args.comparison)), markup=False)
    else:
        raise ValueError(f"Unknown verb: {verb}")


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    console = Console()

    settings = load_timerctl_settings(profile=args.profile)
    client_settings = settings.client.model_copy(update=_client_overrides(args))

    with build_client(client_settings) as client:
        try:
            if args.verb == "demo":
                run_demo(
                    client,
                    SystemSleeperPort(),
                    on_snapshot=lambda snap: console.print(render_snapshot(snap)),
                    interval_s=args.interval or settings.split_interval_s,
                    comparison=args.comparison if args.comparison is not None else settings.comparison,
                    max_splits=args.max_splits,
                )
            else:
                _dispatch(client, args, console)
        except TimerClientError as ex:
            console.print(f"timerctl: {args.verb} failed: {ex}", markup=False, style="red")
            return 1
        except KeyboardInterrupt:
            console.print("\ntimerctl: interrupted.", markup=False)
            return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
