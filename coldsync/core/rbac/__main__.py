"""CLI for inspecting the ColdSync permission matrix.

    python -m coldsync.core.rbac matrix --format yaml
    python -m coldsync.core.rbac check Personal --route settings
    python -m coldsync.core.rbac assignable ADMIN
"""

import argparse
import json
import sys
from typing import List, Optional

import yaml

from ...common.logger import get_logger, setup_from_settings
from ..config import get_settings
from .checker import PermissionChecker
from .permissions import matrix_as_dict

logger = get_logger("rbac.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coldsync-rbac",
        description="Inspect ColdSync role permissions",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    matrix = subparsers.add_parser("matrix", help="Dump the full permission matrix")
    matrix.add_argument("--format", choices=["yaml", "json"], default="yaml")

    check = subparsers.add_parser("check", help="Evaluate a single permission")
    check.add_argument("role", nargs="?", default=None, help="Role code or legacy label")
    target = check.add_mutually_exclusive_group(required=True)
    target.add_argument("--route", help="Application route id")
    target.add_argument("--tab", help="Settings tab id")
    target.add_argument("--resource", help="Protected resource kind")
    check.add_argument("--action", help="CRUD action, only with --resource (default: view)")
    check.add_argument("--platform", action="store_true", help="Caller is a platform user")

    assignable = subparsers.add_parser("assignable", help="List roles the caller may assign")
    assignable.add_argument("role", nargs="?", default=None, help="Role code or legacy label")
    assignable.add_argument("--platform", action="store_true", help="Caller is a platform user")

    return parser


def _dump_matrix(fmt: str) -> str:
    data = matrix_as_dict()
    if fmt == "json":
        return json.dumps(data, indent=2)
    return yaml.safe_dump(data, sort_keys=False)


def _check(args: argparse.Namespace) -> bool:
    checker = PermissionChecker(args.role, args.platform)
    if args.route is not None:
        return checker.can_access_route(args.route)
    if args.tab is not None:
        return checker.can_access_tab(args.tab)
    if args.action is None:
        return checker.can_view_resource(args.resource)
    return checker.can(args.resource, args.action)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "check" and args.action is not None and args.resource is None:
        parser.error("--action requires --resource")
    setup_from_settings(get_settings())
    logger.debug("Running %s", args.command)

    if args.command == "matrix":
        print(_dump_matrix(args.format))
        return 0

    if args.command == "check":
        allowed = _check(args)
        print("allow" if allowed else "deny")
        return 0 if allowed else 1

    checker = PermissionChecker(args.role, args.platform)
    for role in checker.assignable_roles():
        print(role.value)
    return 0


if __name__ == "__main__":
    sys.exit(main())
