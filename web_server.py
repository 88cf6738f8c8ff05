# -*- coding: utf-8 -*-
from __future__ import annotations

########################
# web_server.py
########################
# Purpose:
# - Local Flask web server for the score handoff and round status.
# - Accepts score submissions and serves leaderboard rankings per category.
#
# Design notes:
# - Leaderboard storage lives in leaderboard.py. This module only validates and routes.
# - Round status comes from a bound provider so the server never owns round state.
# - Every response carries permissive CORS headers; OPTIONS preflight answers 200.
#
########################
# Interfaces:
# Public dataclasses:
# - WebServerConfig(host: str, port: int, debug: bool)
#
# Public functions:
# - create_flask_app(config: WebServerConfig, *, leaderboard: Optional[Leaderboard] = None,
#                    status_provider: Optional[Callable[[], dict]] = None) -> flask.Flask
# - main(argv: Optional[list[str]] = None) -> int
#
# Inputs:
# - HTTP requests:
#   - /api/status (GET)
#   - /api/memorhythm/submit (POST)
#   - /api/memorhythm/leaderboard/<category> (GET, ?limit=N)
#
# Outputs:
# - JSON responses.
#
########################
# Tests:
#   - python web_server.py --host 127.0.0.1 --port 5178
########################

import argparse
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from flask import Flask, Response, jsonify, request

from game_config import get_config
from leaderboard import Leaderboard, UnknownCategoryError
from sequence_models import ScoreSubmission, SubmissionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WebServerConfig:
    host: str
    port: int
    debug: bool = False


def _idle_status() -> Dict[str, Any]:
    return {"ok": True, "state": "IDLE", "round": 1}


def create_flask_app(
    config: WebServerConfig,
    *,
    leaderboard: Optional[Leaderboard] = None,
    status_provider: Optional[Callable[[], Dict[str, Any]]] = None,
) -> Flask:
    flask_app = Flask(__name__, static_folder=None)
    flask_app.config["MEMORHYTHM_WEB_SERVER"] = config

    leaderboard_instance = leaderboard if leaderboard is not None else Leaderboard()
    flask_app.extensions["memorhythm_leaderboard"] = leaderboard_instance

    status_state: Dict[str, Optional[Callable[[], Dict[str, Any]]]] = {"provider": status_provider}

    def bind_status_provider(provider: Optional[Callable[[], Dict[str, Any]]]) -> None:
        status_state["provider"] = provider

    flask_app.extensions["memorhythm_bind_status_provider"] = bind_status_provider

    @flask_app.after_request
    def add_cors_headers(response: Response) -> Response:
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        response.headers["Cache-Control"] = "no-store"
        return response

    def preflight_response() -> Response:
        return flask_app.response_class(status=200)

    @flask_app.errorhandler(404)
    def not_found(_error: Any):
        return jsonify({"ok": False, "error": "Not found"}), 404

    @flask_app.get("/api/status")
    def api_status():
        provider = status_state["provider"]
        if provider is None:
            return jsonify(_idle_status())
        try:
            return jsonify(provider())
        except Exception as exception:
            logger.exception("status provider failed")
            return jsonify({"ok": False, "state": "ERROR", "error": str(exception)}), 500

    @flask_app.route("/api/memorhythm/submit", methods=["POST", "OPTIONS"])
    def api_submit():
        if request.method == "OPTIONS":
            return preflight_response()

        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({"ok": False, "error": "Request body must be a JSON object"}), 400

        try:
            submission = ScoreSubmission.from_dict(payload)
        except SubmissionError as exception:
            logger.warning("rejected score submission: %s", exception)
            return jsonify({"ok": False, "error": str(exception)}), 400

        try:
            updated_categories = leaderboard_instance.submit(submission)
        except Exception as exception:
            logger.exception("score submission failed")
            return jsonify({"ok": False, "error": f"Internal Server Error: {exception}"}), 500

        if updated_categories:
            return jsonify({"ok": True, "updated": True, "categories": updated_categories})
        return jsonify(
            {
                "ok": True,
                "updated": False,
                "categories": [],
                "message": "No scores were higher than existing records",
            }
        )

    @flask_app.route("/api/memorhythm/leaderboard/<category>", methods=["GET", "OPTIONS"])
    def api_leaderboard(category: str):
        if request.method == "OPTIONS":
            return preflight_response()

        limit_text = (request.args.get("limit") or "").strip()
        limit: Optional[int] = None
        if limit_text:
            try:
                limit = int(limit_text)
            except ValueError:
                return jsonify({"ok": False, "error": "limit must be an integer"}), 400
            if limit < 1:
                return jsonify({"ok": False, "error": "limit must be at least 1"}), 400

        try:
            entries = leaderboard_instance.top(category, limit)
        except UnknownCategoryError as exception:
            return jsonify({"ok": False, "error": str(exception)}), 404

        return jsonify(
            {
                "ok": True,
                "category": category.strip().lower(),
                "entries": [entry.to_dict() for entry in entries],
            }
        )

    return flask_app


def _parse_args(argv: Optional[list] = None) -> WebServerConfig:
    app_config, _config_path = get_config()
    argument_parser = argparse.ArgumentParser(description="Memorhythm local web server")
    argument_parser.add_argument("--host", default=app_config.server.host, help="Bind host, 0.0.0.0 for LAN access")
    argument_parser.add_argument("--port", type=int, default=app_config.server.port, help="Bind port")
    argument_parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    parsed = argument_parser.parse_args(argv)

    return WebServerConfig(host=str(parsed.host), port=int(parsed.port), debug=bool(parsed.debug))


def run_server(config: WebServerConfig, leaderboard: Optional[Leaderboard] = None) -> None:
    app_config, _config_path = get_config()
    flask_app = create_flask_app(config, leaderboard=leaderboard or Leaderboard(app_config.leaderboard))
    flask_app.run(host=config.host, port=config.port, debug=config.debug, use_reloader=False)


def main(argv: Optional[list] = None) -> int:
    logging.basicConfig(level=logging.INFO)
    run_server(_parse_args(argv))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
