"""Command-line interface for the user board."""

from __future__ import annotations
import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from typing import Sequence

from userboard.client import UsersClient
from userboard.config import AppConfig, load_config
from userboard.controller import ViewSyncController
from userboard.models import ViewState

logger = logging.getLogger("userboard.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User board utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Serve the user board page")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address for the page server")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=3000,
        help="Port for the page server (default: 3000)",
    )
    serve_parser.add_argument(
        "--api-url",
        default=None,
        help="Base URL of the users service (default: USERBOARD_API_URL or http://localhost:5000)",
    )
    serve_parser.add_argument(
        "--environment",
        default=None,
        help="Environment label shown on the page (default: USERBOARD_ENV or development)",
    )

    users_parser = subparsers.add_parser(
        "users", help="Fetch users and backend status once and print them"
    )
    users_parser.add_argument(
        "--api-url",
        default=None,
        help="Base URL of the users service",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "users"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _resolve_config(args: argparse.Namespace) -> AppConfig:
    try:
        config = load_config()
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    api_url = getattr(args, "api_url", None)
    if api_url:
        config = replace(config, api_url=api_url)
    environment = getattr(args, "environment", None)
    if environment:
        config = replace(config, environment=environment)
    return config


def _serve(config: AppConfig, *, host: str, port: int) -> None:
    from userboard.service import create_app
    import uvicorn

    logger.info("Starting user board on http://%s:%s (backend %s)", host, port, config.api_url)
    app = create_app(config=config)
    uvicorn.run(app, host=host, port=port, log_level="info")


def _print_state(state: ViewState) -> None:
    print(state.backend_status)
    if state.message:
        print(state.message)
        return

    if not state.users:
        print("No users are currently registered.")
        return

    print(f"{len(state.users)} user(s) found:")
    print(f"{'ID':>6}  {'Name':<24}  {'Email':<32}  Created")
    print("-" * 80)
    for user in state.users:
        created = user.created_at.strftime("%Y-%m-%d %H:%M:%S") if user.created_at else "-"
        print(f"{user.id:>6}  {user.name:<24}  {user.email:<32}  {created}")


async def _snapshot(config: AppConfig) -> ViewState:
    async with UsersClient(config.api_url, timeout=config.request_timeout) as client:
        controller = ViewSyncController(client, config)
        await controller.activate()
        return controller.state


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    config = _resolve_config(args)

    if args.command == "serve":
        _serve(config, host=args.host, port=args.port)
    elif args.command == "users":
        _print_state(asyncio.run(_snapshot(config)))


if __name__ == "__main__":
    main()
