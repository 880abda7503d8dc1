"""Command line entry point for the file receiver bridge.

Usage:
    # Serve a solution on the default port (8080)
    file-receiver serve --solution path/to/App.sln

    # Query a running bridge
    file-receiver projects
    file-receiver folders --project C:/src/App

    # Deliver a file into a project folder
    file-receiver send Login.feature --folder Features --base64

    # Store defaults used by the client commands
    file-receiver config --set project_directory=C:/src/App --set menu_name=Orders
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from .client.bridge_client import BridgeClient, BridgeClientError
from .client.settings_store import ClientSettings, SettingsStore, missing_mandatory_fields
from .core.settings import BridgeSettings

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".file_receiver" / "settings.json"


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _parse_assignments(pairs: List[str]) -> Dict[str, Any]:
    known = {f.name: f for f in fields(ClientSettings)}
    changes: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or key not in known:
            raise ValueError(f"Unknown setting '{pair}'. Choose from {', '.join(known)}.")
        if key == "extension_enabled":
            changes[key] = value.strip().lower() in {"1", "true", "yes", "on"}
        else:
            changes[key] = value.strip()
    return changes


def _client(args: argparse.Namespace, settings: ClientSettings) -> BridgeClient:
    return BridgeClient(args.url or settings.bridge_url)


def _serve_settings(args: argparse.Namespace) -> BridgeSettings:
    return BridgeSettings.from_env(port=args.port).with_overrides(
        host=args.host,
        solution_path=args.solution,
        startup_project=args.startup_project,
        log_file=args.log_file,
    )


def cmd_serve(args: argparse.Namespace, settings: BridgeSettings) -> int:
    from .service import FileReceiverService

    service = FileReceiverService(settings)
    try:
        return 0 if service.serve_forever() else 1
    except KeyboardInterrupt:
        return 0


def cmd_projects(args: argparse.Namespace, settings: ClientSettings) -> int:
    _print_json({"projects": _client(args, settings).list_projects()})
    return 0


def cmd_folders(args: argparse.Namespace, settings: ClientSettings) -> int:
    project = args.project if args.project is not None else settings.project_directory
    _print_json({"folders": _client(args, settings).list_folders(project or None)})
    return 0


def cmd_send(args: argparse.Namespace, settings: ClientSettings) -> int:
    source: Path = args.file
    data = source.read_bytes()
    if args.base64:
        content: str | bytes = data
    else:
        content = data.decode("utf-8")
    folder = args.folder if args.folder is not None else settings.folder_path
    project = args.project if args.project is not None else settings.project_directory
    message = _client(args, settings).send_file(
        args.name or source.name,
        content,
        folder_path=folder or None,
        project_directory=project or None,
    )
    print(message)
    return 0


def cmd_config(args: argparse.Namespace, store: SettingsStore) -> int:
    if args.set:
        settings = store.update(**_parse_assignments(args.set))
    else:
        settings = store.load()
    _print_json(asdict(settings))
    missing = missing_mandatory_fields(settings)
    if missing:
        print(f"Missing mandatory fields: {', '.join(missing)}", file=sys.stderr)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="file-receiver",
        description="Local bridge that delivers generated files into an open solution",
    )
    parser.add_argument("--settings", type=Path, default=DEFAULT_SETTINGS_PATH, help="Client settings file")
    parser.add_argument("--url", default=None, help="Bridge URL (defaults to the stored bridge_url)")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the bridge HTTP service")
    serve.add_argument("--solution", type=Path, default=None, help="Path to the .sln file")
    serve.add_argument("--host", default=None, help="Interface to bind (default 127.0.0.1)")
    serve.add_argument("--port", type=int, default=None, help="Port to bind (default 8080)")
    serve.add_argument("--startup-project", default=None, help="Name of the startup project")
    serve.add_argument("--log-file", type=Path, default=None, help="Also write the output pane to this file")

    sub.add_parser("projects", help="List projects of the open solution")

    folders = sub.add_parser("folders", help="List folders of a project")
    folders.add_argument("--project", default=None, help="Project directory (default: active project)")

    send = sub.add_parser("send", help="Send a file into a project")
    send.add_argument("file", type=Path, help="File to send")
    send.add_argument("--name", default=None, help="File name in the project (default: source name)")
    send.add_argument("--folder", default=None, help="Folder relative to the project root")
    send.add_argument("--project", default=None, help="Project directory (default: active project)")
    send.add_argument("--base64", action="store_true", help="Send the content base64 encoded")

    config = sub.add_parser("config", help="Show or change stored client settings")
    config.add_argument("--set", action="append", metavar="KEY=VALUE", help="Change a setting")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # serve logs through the output pane
    if args.command == "serve":
        try:
            settings = _serve_settings(args)
        except ValueError as exc:
            parser.error(str(exc))
        return cmd_serve(args, settings)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    store = SettingsStore(args.settings)
    if args.command == "config":
        try:
            return cmd_config(args, store)
        except ValueError as exc:
            parser.error(str(exc))

    handlers = {"projects": cmd_projects, "folders": cmd_folders, "send": cmd_send}
    try:
        return handlers[args.command](args, store.load())
    except BridgeClientError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
