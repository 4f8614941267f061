"""Status server: exposes ``logs.json`` and the browser dashboard over HTTP.

Routes (exact path match; the HTTP method is not inspected, and HEAD
gets the same headers without a body):

    /logs.json                  -- the iteration log as a JSON array
    / and /dashboard.html       -- the static dashboard page
    anything else               -- 404

The log is re-read on every request, so the page always shows what the
runner last wrote.
"""

from __future__ import annotations

import json
import webbrowser
from functools import partial
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

from rich.markup import escape

from loop_agent.config import Config
from loop_agent.log_store import read_log
from loop_agent.utils import console, print_banner

LOGS_PATH = "/logs.json"
DASHBOARD_PATHS = ("/", "/dashboard.html")


class StatusRequestHandler(BaseHTTPRequestHandler):
    """Serves the log and dashboard files it was constructed with."""

    server_version = "LoopAgentStatus/0.1"

    def __init__(self, *args, log_file: Path, dashboard_file: Path, **kwargs) -> None:
        self.log_file = Path(log_file)
        self.dashboard_file = Path(dashboard_file)
        super().__init__(*args, **kwargs)

    def handle_route(self) -> None:
        if self.path == LOGS_PATH:
            body = json.dumps(
                read_log(self.log_file), ensure_ascii=False, separators=(",", ":")
            ).encode("utf-8")
            self._send(
                200,
                body,
                "application/json",
                extra_headers={"Access-Control-Allow-Origin": "*"},
            )
            return

        if self.path in DASHBOARD_PATHS:
            try:
                body = self.dashboard_file.read_bytes()
            except OSError:
                self._not_found()
                return
            self._send(200, body, "text/html; charset=utf-8")
            return

        self._not_found()

    do_GET = handle_route
    do_POST = handle_route
    do_PUT = handle_route
    do_PATCH = handle_route
    do_DELETE = handle_route
    do_HEAD = handle_route
    do_OPTIONS = handle_route

    def _not_found(self) -> None:
        self._send(404, b"Not found", "text/plain; charset=utf-8")

    def _send(
        self,
        status: int,
        body: bytes,
        content_type: str,
        extra_headers: dict[str, str] | None = None,
    ) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        for name, value in (extra_headers or {}).items():
            self.send_header(name, value)
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)

    def log_message(self, format: str, *args) -> None:
        console.print(f"[dim]{escape(self.address_string())} - {escape(format % args)}[/dim]")


def create_server(config: Config, host: str = "") -> ThreadingHTTPServer:
    """Bind the status server to ``config.port``.

    Raises:
        OSError: If the port cannot be bound.
    """
    handler = partial(
        StatusRequestHandler,
        log_file=config.log_file,
        dashboard_file=config.dashboard_file,
    )
    return ThreadingHTTPServer((host, config.port), handler)


def open_browser(url: str) -> bool:
    """Best-effort attempt to open *url*; returns whether it worked."""
    try:
        return webbrowser.open(url)
    except webbrowser.Error:
        return False


def serve(config: Config) -> None:
    """Run the status server until interrupted."""
    server = create_server(config)
    port = server.server_address[1]
    url = f"http://localhost:{port}"

    print_banner(
        "📊 LOOP AGENT DASHBOARD",
        [
            f"[dim]URL: {url}[/dim]",
            "[dim]Auto-refresh: 3 seconds[/dim]",
            f"[dim]Log: {config.log_file}[/dim]",
        ],
    )

    if config.open_browser:
        open_browser(url)

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        console.print("\n[yellow]Shutting down...[/yellow]")
    finally:
        server.server_close()


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``python -m loop_agent.server``."""
    import argparse

    parser = argparse.ArgumentParser(description="Loop Agent status server")
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: $LOOP_PORT, $PORT or 3456)",
    )
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Do not open the dashboard in a browser",
    )
    args = parser.parse_args(argv)

    config = Config.from_env(port=args.port)
    if args.no_browser:
        config.open_browser = False
    serve(config)


if __name__ == "__main__":
    main()
