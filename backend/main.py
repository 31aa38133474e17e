"""
HTTP server for ratingwatch.

Exposes the rating service over a threaded stdlib HTTP server: every request is
handled on its own thread, and storage work is handed to the service's
executor.
"""

from __future__ import annotations

import argparse
import json
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Dict, List, Optional, Type
from urllib.parse import urlsplit

from dotenv import load_dotenv
from pydantic import ValidationError

from backend.service import InteractionService, create_service
from ratingwatch.anomaly import NewInteraction
from ratingwatch.core.config import Config
from ratingwatch.core.exceptions import DataValidationError, RatingWatchError
from ratingwatch.core.logging_config import setup_logging
from ratingwatch.storage import SqlSampleStore

load_dotenv()

logger = logging.getLogger("backend")

TABLE_PAGE = "table.html"


def _allowed_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def _parse_interaction(body: Optional[Dict[str, Any]]) -> NewInteraction:
    if body is None:
        raise DataValidationError("Expected a JSON object with source, target and rating")
    try:
        return NewInteraction.model_validate(body)
    except ValidationError as exc:
        raise DataValidationError(str(exc)) from exc


class RatingHandler(BaseHTTPRequestHandler):
    server_version = "RatingWatch/0.1"

    service: InteractionService
    static_dir: Path = Path("static")
    allowed_origins: List[str] = ["*"]

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)

    def _cors_headers(self) -> None:
        origin = self.headers.get("Origin")
        if "*" in self.allowed_origins:
            allow = origin or "*"
        elif origin and origin in self.allowed_origins:
            allow = origin
        else:
            return
        self.send_header("Access-Control-Allow-Origin", allow)
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        if allow != "*":
            self.send_header("Access-Control-Allow-Credentials", "true")
            self.send_header("Vary", "Origin")

    def _send_json(self, status: int, payload: Any) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self._cors_headers()
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_file(self, path: Path, content_type: str) -> None:
        body = path.read_bytes()
        self.send_response(200)
        self.send_header("Content-Type", content_type)
        self._cors_headers()
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _read_json(self) -> Optional[Dict[str, Any]]:
        length = int(self.headers.get("Content-Length", "0"))
        if length <= 0:
            return None
        data = self.rfile.read(length)
        try:
            payload = json.loads(data.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
        return payload if isinstance(payload, dict) else None

    @property
    def route(self) -> str:
        return urlsplit(self.path).path

    def do_GET(self) -> None:
        if self.route == "/health":
            self._send_json(200, {"status": "ok"})
            return

        if self.route == "/stats":
            self._send_json(200, self.service.aggregate().model_dump())
            return

        if self.route == "/all_interactions":
            self._send_json(200, [sample.model_dump() for sample in self.service.list_all()])
            return

        if self.route == "/entity_stats":
            self._send_json(200, [report.model_dump() for report in self.service.entity_stats()])
            return

        if self.route == "/table_page":
            self._handle_table_page()
            return

        self._send_json(404, {"detail": "Not found"})

    def do_OPTIONS(self) -> None:
        self.send_response(204)
        self._cors_headers()
        self.end_headers()

    def do_POST(self) -> None:
        if self.route == "/add_interaction":
            self._handle_add_interaction()
            return

        self._send_json(404, {"detail": "Not found"})

    def _handle_add_interaction(self) -> None:
        content_type = self.headers.get("Content-Type", "")
        if "application/json" not in content_type:
            self._send_json(415, {"detail": "Expected application/json"})
            return

        try:
            interaction = _parse_interaction(self._read_json())
        except DataValidationError as exc:
            self._send_json(422, {"detail": str(exc)})
            return

        decision = self.service.ingest(interaction)
        self._send_json(200, decision.model_dump())

    def _handle_table_page(self) -> None:
        page = self.static_dir / TABLE_PAGE
        if not page.is_file():
            self._send_json(404, {"detail": "Not found"})
            return
        self._send_file(page, "text/html; charset=utf-8")


def make_handler(
    service: InteractionService,
    static_dir: Path,
    allowed_origins: str = "*",
) -> Type[RatingHandler]:
    """Bind a service and static directory to a fresh handler class."""
    return type(
        "BoundRatingHandler",
        (RatingHandler,),
        {
            "service": service,
            "static_dir": Path(static_dir),
            "allowed_origins": _allowed_origins(allowed_origins),
        },
    )


def build_server(service: InteractionService, settings: Config, host: str, port: int) -> ThreadingHTTPServer:
    handler = make_handler(service, settings.server.static_dir, settings.server.allowed_origins)
    server = ThreadingHTTPServer((host, port), handler)
    server.daemon_threads = True
    return server


def run(host: Optional[str] = None, port: Optional[int] = None, in_memory: bool = False) -> None:
    settings = Config()
    setup_logging("backend", settings)
    setup_logging("ratingwatch", settings)

    host = host or settings.server.host
    port = settings.server.port if port is None else port

    service = create_service(settings, in_memory=in_memory)
    if isinstance(service.store, SqlSampleStore):
        try:
            service.store.ensure_schema()
        except RatingWatchError as exc:
            logger.warning("Could not prepare ratings table: %s", exc)

    logger.info("Starting backend server on %s:%s", host, port)
    if in_memory:
        storage = "in-memory"
    elif settings.storage.database_url:
        storage = "database"
    else:
        storage = "<DATABASE_URL not set>"
    logger.info("Storage: %s", storage)
    logger.info(
        "Policy: baseline=%s ingest_scope=%s remote=%s",
        settings.policy.baseline.value,
        settings.policy.ingest_scope.value,
        settings.remote.enabled,
    )

    server = build_server(service, settings, host, port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()
        service.shutdown()


def main() -> None:
    parser = argparse.ArgumentParser(description="ratingwatch backend server")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--in-memory", action="store_true", help="Use a non-durable in-process store")
    args = parser.parse_args()

    run(args.host, args.port, in_memory=args.in_memory)


if __name__ == "__main__":
    main()
