"""Command-line interface for subtree-deploy.

Usage:
    subtree-deploy revision [--next]
    subtree-deploy setup
    subtree-deploy clean
    subtree-deploy update [--commit REV] [--no-commit] [--extra-file PATH ...]
    subtree-deploy build <branch> [--run CMD] [--no-commit]
    subtree-deploy push <branch>
    subtree-deploy deploy <branch> [--run CMD]
"""

from __future__ import annotations

import argparse
import logging
import sys

import yaml

from subtree_deploy.cli.commands import (
    cmd_build,
    cmd_clean,
    cmd_deploy,
    cmd_push,
    cmd_revision,
    cmd_setup,
    cmd_update,
)
from subtree_deploy.git.runner import ProcessError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="subtree-deploy",
        description="Vendor an upstream subtree and push build output to a deploy branch",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to YAML config (default: $SUBTREE_DEPLOY_CONFIG or .subtree-deploy.yaml)",
    )
    parser.add_argument("--repository", default=None, help="Upstream repository URL")
    parser.add_argument("--prefix", default=None, help="Subtree directory in this repo")
    parser.add_argument("--branch", default=None, help="Upstream branch to vendor")
    parser.add_argument("--remote-name", default=None, help="Name of the upstream remote")
    parser.add_argument("--revision-file", default=None, help="File recording the vendored revision")
    parser.add_argument("--build-dir", default=None, help="Build workspace directory")
    parser.add_argument("--git-command", default=None, help="git executable")
    parser.add_argument("--source-root", default=None, help="Host repository root")
    parser.add_argument(
        "--timeout", type=float, default=None,
        help="Per-command timeout in seconds (default: none)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log every git command",
    )
    sub = parser.add_subparsers(dest="command")

    rev = sub.add_parser("revision", help="Show the vendored revision")
    rev.add_argument(
        "--next", action="store_true",
        help="Show the upstream branch tip instead",
    )

    sub.add_parser("setup", help="Register and fetch the upstream remote")
    sub.add_parser("clean", help="Remove the upstream remote")

    upd = sub.add_parser("update", help="Replace the subtree with an upstream revision")
    upd.add_argument("--commit", default=None, help="Revision to vendor (default: upstream tip)")
    upd.add_argument(
        "--no-commit", action="store_true",
        help="Stage the update without committing",
    )
    upd.add_argument(
        "--extra-file", action="append", default=[],
        help="Additional path to include in the commit (repeatable)",
    )

    bld = sub.add_parser("build", help="Build a deploy branch in the workspace")
    bld.add_argument("branch", help="Deploy branch")
    bld.add_argument("--run", default=None, help="Build command to run in the workspace")
    bld.add_argument(
        "--no-commit", action="store_true",
        help="Stage the build output without committing",
    )

    psh = sub.add_parser("push", help="Push the deploy branch from the workspace")
    psh.add_argument("branch", help="Deploy branch")

    dep = sub.add_parser("deploy", help="Build, commit and push a deploy branch")
    dep.add_argument("branch", help="Deploy branch")
    dep.add_argument("--run", default=None, help="Build command to run in the workspace")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(message)s",
    )

    dispatch = {
        "revision": cmd_revision,
        "setup": cmd_setup,
        "clean": cmd_clean,
        "update": cmd_update,
        "build": cmd_build,
        "push": cmd_push,
        "deploy": cmd_deploy,
    }

    try:
        return dispatch[args.command](args)
    except ProcessError as e:
        print(f"  ERROR: {e}", file=sys.stderr)
        return 1
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        print(f"  ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
