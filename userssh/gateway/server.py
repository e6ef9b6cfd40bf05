#!/usr/bin/env python3
"""HTTP command surface - runs on the host that owns the SSH credentials."""

from __future__ import annotations

import asyncio
import hmac
import json
import logging
import signal
import sys
import threading
from http.server import ThreadingHTTPServer, BaseHTTPRequestHandler

from dotenv import load_dotenv

from ..config import AppConfig, load_config
from .core import COMMANDS, SSHGateway

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 1_048_576  # 1 MB

# Set by configure()
TOKEN = ""
_GATEWAY: SSHGateway | None = None


def configure(config: AppConfig) -> None:
    """Install the gateway and auth token used by GatewayHandler."""
    global TOKEN, _GATEWAY
    if config.ssh is None:
        raise ValueError("the 'ssh' config section is required to run the gateway server")
    TOKEN = config.gateway.token or ""
    _GATEWAY = SSHGateway(config.ssh)


def validate_request(data: dict) -> tuple[bool, int, str]:
    """Validate a /command request body.

    Returns (ok, http_status, error_message). If ok is True, status/message are unused.
    """
    if not isinstance(data, dict):
        return False, 400, "request body must be a JSON object"

    command = data.get("command")
    if not command:
        return False, 400, "missing 'command' field"
    if command not in COMMANDS:
        return False, 404, f"unknown command: {command}"

    user_id = data.get("user_id")
    if user_id is None or str(user_id) == "":
        return False, 400, "missing 'user_id' field"

    text = data.get("text", "")
    if not isinstance(text, str):
        return False, 400, "'text' must be a string"

    return True, 0, ""


class GatewayHandler(BaseHTTPRequestHandler):

    def do_GET(self):
        if self.path == "/health":
            if _GATEWAY is None:
                self._respond(503, {"status": "unconfigured"})
                return
            self._respond(200, {
                "status": "ok",
                "host": _GATEWAY.config.host,
                "port": _GATEWAY.config.port,
            })
        else:
            self._respond(404, {"error": "not found"})

    def do_POST(self):
        if self.path != "/command":
            self._respond(404, {"error": "not found"})
            return
        if not self._check_auth():
            return

        data = self._read_json()
        if data is None:
            return

        ok, status, error = validate_request(data)
        if not ok:
            self._respond(status, {"error": error})
            return

        if _GATEWAY is None:
            self._respond(503, {"error": "gateway not configured"})
            return

        try:
            # Each handler thread gets its own event loop
            reply = asyncio.run(_GATEWAY.handle(
                data["command"], str(data["user_id"]), data.get("text", ""),
            ))
        except Exception as e:
            logger.exception("Command %s failed", data["command"])
            self._respond(500, {"error": str(e)})
            return

        self._respond(200, {"reply": reply})

    # --- Helpers ---

    def _check_auth(self) -> bool:
        auth = self.headers.get("Authorization", "")
        expected = f"Bearer {TOKEN}"
        if TOKEN and hmac.compare_digest(auth, expected):
            return True
        self._respond(401, {"error": "unauthorized"})
        return False

    def _read_json(self):
        try:
            length = int(self.headers.get("Content-Length", 0))
            if length < 0 or length > MAX_CONTENT_LENGTH:
                self._respond(413, {"error": f"request body too large (max {MAX_CONTENT_LENGTH} bytes)"})
                return None
            return json.loads(self.rfile.read(length))
        except (ValueError, json.JSONDecodeError):
            self._respond(400, {"error": "invalid JSON"})
            return None

    def _respond(self, code: int, data: dict):
        body = json.dumps(data).encode()
        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        logger.info(format, *args)


def main(config_path: str = "config.yaml") -> None:
    load_dotenv()
    config = load_config(config_path)
    logging.basicConfig(
        level=getattr(logging, config.logging.level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    configure(config)

    # Require authentication token
    if not TOKEN:
        logger.critical("gateway.token is not set. "
                        "The gateway requires authentication to prevent unauthorized access.")
        sys.exit(1)

    port = config.gateway.port
    logger.info("SSH gateway on 0.0.0.0:%d -> %s@%s:%d",
                port, config.ssh.username, config.ssh.host, config.ssh.port)
    server = ThreadingHTTPServer(("0.0.0.0", port), GatewayHandler)
    server.daemon_threads = True

    stop = threading.Event()

    def _shutdown(signum, _frame):
        logger.info("Shutting down gateway...")
        stop.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    server_thread = threading.Thread(target=server.serve_forever, daemon=True)
    server_thread.start()

    stop.wait()
    server.shutdown()
    server.server_close()
    logger.info("Gateway stopped.")


if __name__ == "__main__":
    main()
