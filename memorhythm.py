"""
memorhythm.py

Command line entrypoint for the Memorhythm round engine.

Commands
- sequence  Print a deterministic sequence for a round as JSON.
- demo      Play rounds headless on a virtual clock with simulated input and print the results.
- serve     Run the local web server (score submission and leaderboards).
- config    Print the effective configuration.

Every command prints a JSON payload with an "ok" flag and returns a process exit code.
"""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, List, Optional

from game_config import GameConfig, get_config, to_json
from leaderboard import Leaderboard
from round_controller import GameState, RoundController
from round_timers import ManualTimerScheduler
from seeded_random import DEFAULT_TEST_SEED, SeededRandom
from sequence_generator import generate_round_sequence
from sequence_models import ScoreSubmission
import web_server


def _print_payload(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _command_sequence(args: argparse.Namespace, config: GameConfig) -> int:
    rng = SeededRandom(args.seed)
    targets = generate_round_sequence(args.round, args.width, args.height, rng, config.sequence)
    _print_payload(
        {
            "ok": True,
            "seed": rng.seed(),
            "round": int(args.round),
            "width": float(args.width),
            "height": float(args.height),
            "targets": [target.to_dict() for target in targets],
        }
    )
    return 0


def run_demo(
    *,
    config: GameConfig,
    seed: int,
    rounds: int,
    offset_px: float = 0.0,
    width: float = 1920.0,
    height: float = 1080.0,
) -> List[Dict[str, Any]]:
    """Play `rounds` rounds, replaying every target `offset_px` to the right of where it was shown."""
    scheduler = ManualTimerScheduler()
    controller = RoundController(
        rng=SeededRandom(seed),
        scheduler=scheduler,
        config=config,
        canvas_width=width,
        canvas_height=height,
    )

    results: List[Dict[str, Any]] = []
    controller.start_game()
    for _round_index in range(int(rounds)):
        scheduler.run_until_idle()
        if controller.state() != GameState.PLAYER_TURN:
            break

        input_start_ms = scheduler.now_ms()
        for target in controller.sequence():
            controller.on_interaction_start(target.x + offset_px, target.y, input_start_ms + target.time_ms)
            controller.on_interaction_end()

        scheduler.run_until_idle()
        result = controller.last_result()
        if controller.state() != GameState.SCORING or result is None:
            break

        results.append(result.to_dict())
        controller.next_round()

    controller.reset()
    return results


def _command_demo(args: argparse.Namespace, config: GameConfig) -> int:
    results = run_demo(
        config=config,
        seed=args.seed,
        rounds=args.rounds,
        offset_px=args.offset_px,
        width=args.width,
        height=args.height,
    )

    payload: Dict[str, Any] = {"ok": True, "seed": int(args.seed), "results": results}
    if args.user and results:
        leaderboard = Leaderboard(config.leaderboard)
        for result in results:
            leaderboard.submit(ScoreSubmission.from_dict(dict(result, user=args.user)))
        payload["leaderboard"] = {
            "total": [entry.to_dict() for entry in leaderboard.top("total")],
            "round": [entry.to_dict() for entry in leaderboard.top("round")],
        }
    _print_payload(payload)
    return 0


def _command_serve(args: argparse.Namespace, config: GameConfig) -> int:
    server_config = web_server.WebServerConfig(
        host=str(args.host or config.server.host),
        port=int(args.port or config.server.port),
        debug=bool(args.debug),
    )
    web_server.run_server(server_config, Leaderboard(config.leaderboard))
    return 0


def _command_config(args: argparse.Namespace, config: GameConfig) -> int:
    _print_payload({"ok": True, "config_path": args.config_path_text, "config": json.loads(to_json(config))})
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Memorhythm: musical memory rounds, sequence generation and scoring.")
    parser.add_argument("--log-level", default="WARNING", help="Python logging level (default WARNING)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sequence_parser = subparsers.add_parser("sequence", help="Print a deterministic sequence as JSON")
    sequence_parser.add_argument("--round", type=int, default=1, help="Round number (sequence length is 2 + round)")
    sequence_parser.add_argument("--seed", type=int, default=DEFAULT_TEST_SEED, help=f"RNG seed (default {DEFAULT_TEST_SEED})")
    sequence_parser.add_argument("--width", type=float, default=1920.0)
    sequence_parser.add_argument("--height", type=float, default=1080.0)
    sequence_parser.set_defaults(handler=_command_sequence)

    demo_parser = subparsers.add_parser("demo", help="Play rounds headless with simulated input")
    demo_parser.add_argument("--seed", type=int, default=DEFAULT_TEST_SEED)
    demo_parser.add_argument("--rounds", type=int, default=3)
    demo_parser.add_argument("--offset-px", type=float, default=0.0, help="Horizontal miss applied to every input")
    demo_parser.add_argument("--width", type=float, default=1920.0)
    demo_parser.add_argument("--height", type=float, default=1080.0)
    demo_parser.add_argument("--user", default="", help="Submit the results to an in-memory leaderboard under this name")
    demo_parser.set_defaults(handler=_command_demo)

    serve_parser = subparsers.add_parser("serve", help="Run the local web server")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)
    serve_parser.add_argument("--debug", action="store_true")
    serve_parser.set_defaults(handler=_command_serve)

    config_parser = subparsers.add_parser("config", help="Print the effective configuration")
    config_parser.set_defaults(handler=_command_config)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=str(args.log_level).upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        config, config_path = get_config()
    except Exception as exception:
        _print_payload({"ok": False, "error": str(exception)})
        return 2

    args.config_path_text = str(config_path) if config_path is not None else None
    return int(args.handler(args, config))


if __name__ == "__main__":
    raise SystemExit(main())
