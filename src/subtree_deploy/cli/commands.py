"""Subtree and build CLI commands."""

from __future__ import annotations

import argparse
import shlex
from pathlib import Path

from subtree_deploy.config import SubtreeDeployConfig, load_config
from subtree_deploy.deploy import SubtreeDeploy
from subtree_deploy.git.build import BuildHook
from subtree_deploy.git.runner import ProcessRunner

# argparse dest -> config field
OVERRIDE_OPTIONS = (
    "repository",
    "revision_file",
    "prefix",
    "branch",
    "remote_name",
    "build_dir",
    "git_command",
    "source_root",
)


def resolve_config(args: argparse.Namespace) -> SubtreeDeployConfig:
    overrides = {key: getattr(args, key, None) for key in OVERRIDE_OPTIONS}
    return load_config(args.config, overrides)


def _deployer(args: argparse.Namespace) -> SubtreeDeploy:
    return SubtreeDeploy(resolve_config(args), ProcessRunner(timeout=args.timeout))


def _build_hook(args: argparse.Namespace, runner: ProcessRunner) -> BuildHook | None:
    if not args.run:
        return None
    command = shlex.split(args.run)

    def hook(workspace: Path) -> None:
        runner.run(command, cwd=workspace)

    return hook


def cmd_revision(args: argparse.Namespace) -> int:
    deployer = _deployer(args)
    if args.next:
        print(deployer.next_revision())
        return 0

    revision = deployer.current_revision()
    if revision is None:
        print(f"  No revision recorded in {deployer.config.revision_path}")
        return 1
    print(revision)
    return 0


def cmd_setup(args: argparse.Namespace) -> int:
    deployer = _deployer(args)
    deployer.setup()
    print(f"  Remote {deployer.config.remote_name} -> {deployer.config.repository}")
    return 0


def cmd_clean(args: argparse.Namespace) -> int:
    deployer = _deployer(args)
    deployer.clean()
    print(f"  Removed remote {deployer.config.remote_name}")
    return 0


def cmd_update(args: argparse.Namespace) -> int:
    deployer = _deployer(args)
    update = deployer.update(args.commit)

    print(f"  {deployer.config.prefix}: {update.previous_revision[:8]} -> {update.current_revision[:8]}")
    if args.no_commit:
        print("  Changes staged, not committed")
        return 0

    deployer.commit_update(update, args.extra_file)
    return 0


def cmd_build(args: argparse.Namespace) -> int:
    deployer = _deployer(args)
    checkout = deployer.build(args.branch, _build_hook(args, deployer.runner))
    print(f"  Built {checkout.branch} from {checkout.source_revision[:8]} in {checkout.workspace}")
    if args.no_commit:
        return 0

    if not deployer.commit_build(checkout):
        print("  Build output unchanged")
    return 0


def cmd_push(args: argparse.Namespace) -> int:
    deployer = _deployer(args)
    deployer.push_build(args.branch)
    print(f"  Pushed {args.branch}")
    return 0


def cmd_deploy(args: argparse.Namespace) -> int:
    deployer = _deployer(args)
    committed = deployer.deploy(args.branch, _build_hook(args, deployer.runner))
    state = "new build" if committed else "unchanged"
    print(f"  Pushed {args.branch} ({state})")
    return 0
