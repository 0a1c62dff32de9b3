"""Console entrypoint for gambit.

Applies or checks unified diffs against a workspace, invokes single tools
with JSON arguments, and prints resolved configuration.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Any

from gambit import __version__
from gambit.config import ApprovalPolicy, FsMode, LogLevel, Settings, load_settings
from gambit.logging import configure_run_logger, to_logging_level
from gambit.paths import default_config_path
from gambit.tools.approval import ApprovalRequiredError
from gambit.tools.fs import FsBoundary, FsViolationError
from gambit.tools.patch_parser import PatchError
from gambit.tools.router import ToolRouter, tool_specs


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gambit",
        description="Apply unified diffs to a sandboxed workspace",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version and exit.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging (root=INFO, gambit=DEBUG).")
    parser.add_argument("--fs-mode", choices=[e.value for e in FsMode], dest="fs_mode", help="Filesystem mode")
    parser.add_argument(
        "--approval",
        choices=[e.value for e in ApprovalPolicy],
        dest="approval_policy",
        help="Approval policy override",
    )
    parser.add_argument(
        "--log-level",
        choices=[e.value for e in LogLevel],
        dest="log_level",
        help="Log level override",
    )
    parser.add_argument("--root", dest="workspace_root", help="Workspace root (defaults to the current directory)")
    parser.add_argument("--config-path", dest="config_path", help="Path to config.toml")

    subparsers = parser.add_subparsers(dest="command", required=True)

    apply_parser = subparsers.add_parser(
        "apply",
        help="Apply a patch to the workspace",
        description=(
            "Apply a patch to the workspace. Running apply counts as an explicit request, so the "
            "default on-request policy writes; under --approval always pass --yes."
        ),
    )
    _add_patch_arguments(apply_parser)
    apply_parser.add_argument("--yes", action="store_true", help="Approve writing even under the 'always' policy")

    check_parser = subparsers.add_parser("check", help="Validate a patch without writing")
    _add_patch_arguments(check_parser)

    tool_parser = subparsers.add_parser("tool", help="Invoke a single tool")
    tool_parser.add_argument("name", choices=[spec["function"]["name"] for spec in tool_specs()], help="Tool name")
    tool_parser.add_argument("--json", dest="json_payload", help="JSON payload with tool arguments")
    tool_parser.add_argument("--arg", action="append", default=[], help="key=value pairs for tool args")

    config_parser = subparsers.add_parser("config", help="Config helpers")
    config_sub = config_parser.add_subparsers(dest="config_cmd", required=True)
    config_sub.add_parser("path", help="Print config path")
    config_sub.add_parser("print", help="Print resolved settings")

    return parser


def _add_patch_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("patch_file", nargs="?", default="-", help="Patch file, '-' for stdin")
    parser.add_argument(
        "--path",
        dest="paths",
        action="append",
        default=None,
        help="Restrict the patch to this file (repeatable)",
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    overrides = _collect_overrides(args)
    settings = load_settings(cli_overrides=overrides, config_path=args.config_path, create_if_missing=True)

    _configure_base_logging(debug_enabled=args.debug, gambit_level=settings.log_level)

    if args.command in ("apply", "check"):
        return _run_patch(settings, args)
    if args.command == "tool":
        return _run_tool(settings, args)
    if args.command == "config":
        return _run_config(settings, args)

    parser.error(f"unknown command {args.command}")
    return 1


def _run_patch(settings: Settings, args: argparse.Namespace) -> int:
    policy = settings.approval_policy
    if args.command == "apply" and getattr(args, "yes", False):
        policy = ApprovalPolicy.NEVER
    router = _build_router(settings, policy)
    tool_name = "apply_patch" if args.command == "apply" else "check_patch"

    try:
        payload: dict[str, Any] = {"patch": _read_patch(args.patch_file)}
        if args.paths:
            payload["path"] = args.paths
        results = router.dispatch(tool_name, requested=args.command == "apply", **payload)
    except (PatchError, FsViolationError, ApprovalRequiredError, OSError, UnicodeDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    for result in results:
        message = result["message"]
        print(message if args.command == "apply" else f"would: {message}")
    return 0


def _run_tool(settings: Settings, args: argparse.Namespace) -> int:
    router = _build_router(settings, settings.approval_policy)

    payload: dict[str, Any] = {}
    if args.json_payload:
        payload = json.loads(args.json_payload)
    for pair in args.arg:
        if "=" not in pair:
            raise SystemExit("--arg expects key=value")
        key, value = pair.split("=", 1)
        payload[key] = value

    try:
        result = router.dispatch(args.name, **payload)
    except Exception as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


def _run_config(settings: Settings, args: argparse.Namespace) -> int:
    if args.config_cmd == "path":
        print(Path(args.config_path) if args.config_path else default_config_path())
        return 0
    if args.config_cmd == "print":
        print(settings.model_dump_json(indent=2))
        return 0
    return 1


def _build_router(settings: Settings, policy: ApprovalPolicy) -> ToolRouter:
    boundary = FsBoundary(settings.fs_mode, root=settings.workspace_root)
    run_logger = configure_run_logger(uuid.uuid4().hex, log_level=settings.log_level)
    return ToolRouter(boundary, policy, logger=run_logger)


def _read_patch(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _collect_overrides(args: argparse.Namespace) -> dict[str, Any]:
    default_log_level = LogLevel.DEBUG.value if args.debug else None
    return {
        "fs_mode": args.fs_mode,
        "approval_policy": args.approval_policy,
        "log_level": args.log_level or default_log_level,
        "workspace_root": args.workspace_root,
    }


def _configure_base_logging(*, debug_enabled: bool, gambit_level: LogLevel | str) -> None:
    root_level = logging.INFO if debug_enabled else logging.WARNING

    logging.basicConfig(
        level=root_level,
        stream=sys.__stderr__,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )

    logging.getLogger("gambit").setLevel(to_logging_level(gambit_level))


if __name__ == "__main__":
    sys.exit(main())
