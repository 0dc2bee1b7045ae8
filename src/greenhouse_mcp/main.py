"""Entry point for launching the Greenhouse MCP server."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Iterable, Mapping, TextIO

from .client import GreenhouseClient
from .config import GreenhouseConfig
from .exceptions import ConfigurationError
from .http_server import serve_http
from .server import GreenhouseMCPServer, JSONRPCError


LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    # stderr only: stdout carries the stdio transport.
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the Greenhouse Harvest MCP server")
    parser.add_argument(
        "--transport",
        choices=("stdio", "http"),
        default="stdio",
        help="Transport to serve JSON-RPC over (defaults to stdio)",
    )
    parser.add_argument(
        "--host",
        default=os.getenv("GREENHOUSE_HTTP_HOST", "0.0.0.0"),
        help="Host interface for the HTTP server (defaults to GREENHOUSE_HTTP_HOST or 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the HTTP server. Overrides the GREENHOUSE_HTTP_PORT environment variable.",
    )
    parser.add_argument("--client-id", help="Greenhouse OAuth client id", default=None)
    parser.add_argument("--client-secret", help="Greenhouse OAuth client secret", default=None)
    parser.add_argument(
        "--base-url",
        help="Override the Harvest API base URL (defaults to https://harvest.greenhouse.io/v3)",
        default=None,
    )
    parser.add_argument(
        "--token-url",
        help="Override the OAuth token endpoint (defaults to https://auth.greenhouse.io/token)",
        default=None,
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Request timeout in seconds (no timeout unless set)",
        default=None,
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging output")
    return parser


def _build_config_from_args(args: argparse.Namespace) -> GreenhouseConfig:
    env = dict(os.environ)
    if args.client_id:
        env["GREENHOUSE_CLIENT_ID"] = args.client_id
    if args.client_secret:
        env["GREENHOUSE_CLIENT_SECRET"] = args.client_secret
    if args.base_url:
        env["GREENHOUSE_BASE_URL"] = args.base_url
    if args.token_url:
        env["GREENHOUSE_TOKEN_URL"] = args.token_url
    if args.timeout is not None:
        env["GREENHOUSE_TIMEOUT"] = str(args.timeout)
    return GreenhouseConfig.from_env(env)


def run_stdio(
    mcp_server: GreenhouseMCPServer,
    *,
    input_stream: TextIO | None = None,
    output_stream: TextIO | None = None,
) -> None:
    """Simple stdio transport that consumes JSON-RPC payloads line-by-line."""

    input_stream = input_stream or sys.stdin
    output_stream = output_stream or sys.stdout
    for line in input_stream:
        line = line.strip()
        if not line:
            continue

        try:
            request_payload = json.loads(line)
        except json.JSONDecodeError:
            response_payload = JSONRPCError(-32700, "Parse error").to_response(None)
        else:
            request_id = request_payload.get("id") if isinstance(request_payload, Mapping) else None
            try:
                response_payload = mcp_server.handle_json_rpc(request_payload)
            except JSONRPCError as exc:
                response_payload = exc.to_response(request_id)
            except Exception as exc:  # pragma: no cover - defensive logging
                LOGGER.exception("Unhandled exception while processing stdio JSON-RPC request")
                response_payload = JSONRPCError(-32603, "Internal error", data=str(exc)).to_response(request_id)

        if response_payload is None:
            continue

        output_stream.write(json.dumps(response_payload))
        output_stream.write("\n")
        output_stream.flush()


def main(argv: Iterable[str] | None = None) -> int:
    parser = _create_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    _configure_logging(args.verbose)

    try:
        config = _build_config_from_args(args)
    except ConfigurationError as exc:
        parser.error(str(exc))

    client = GreenhouseClient.from_config(config)
    server = GreenhouseMCPServer(client)

    if args.transport == "stdio":
        LOGGER.info("Starting Greenhouse MCP server in stdio mode")
        run_stdio(server)
        return 0

    LOGGER.info("Starting Greenhouse MCP server in HTTP mode")
    serve_http(server, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":  # pragma: no cover - module execution guard
    sys.exit(main())
