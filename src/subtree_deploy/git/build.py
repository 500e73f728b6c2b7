"""Build pipeline: materialize a deploy branch in a throwaway clone and push it.

The workspace is recreated from scratch on every build. It holds a full
clone of the source repository carrying the source's git config, so it can
push to the same remotes.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from subtree_deploy.config import SubtreeDeployConfig
from subtree_deploy.git.message import MessageComposer
from subtree_deploy.git.runner import Git, ProcessRunner

logger = logging.getLogger(__name__)

BuildHook = Callable[[Path], None]


@dataclass(frozen=True)
class BuildCheckout:
    """State left behind by build(), consumed by commit_build()."""

    branch: str
    source_revision: str
    workspace: Path


class BuildDeployPipeline:
    """Clone, prepare branch, build, commit, push."""

    def __init__(self, config: SubtreeDeployConfig, runner: ProcessRunner | None = None):
        self.config = config
        self.git = Git(runner or ProcessRunner(), config.git_command, config.source_root)
        self.workspace = config.build_path
        self.workspace_git = self.git.at(self.workspace)

    def source_head(self) -> str:
        return self.git.output("rev-parse", "HEAD").strip()

    def branch_exists(self, branch: str) -> bool:
        return self.workspace_git.succeeds(
            "rev-parse", "--verify", "--quiet", f"refs/heads/{branch}",
        )

    def remote_branch_exists(self, branch: str) -> bool:
        return self.workspace_git.succeeds(
            "rev-parse", "--verify", "--quiet", f"refs/remotes/origin/{branch}",
        )

    def has_upstream(self, branch: str) -> bool:
        return self.workspace_git.succeeds("rev-parse", "--abbrev-ref", f"{branch}@{{u}}")

    def has_staged_changes(self) -> bool:
        # diff --quiet exits 1 when there are differences
        return not self.workspace_git.succeeds("diff", "--cached", "--quiet")

    def build(self, dest_branch: str, hook: BuildHook | None = None) -> BuildCheckout:
        """Prepare ``dest_branch`` in the workspace with the source HEAD's files.

        Args:
            dest_branch: Branch that receives the build output.
            hook: Called with the workspace path after the source files are
                checked out; runs the actual build and tests.

        Returns:
            BuildCheckout with the captured source revision.
        """
        source_revision = self.source_head()
        self._recreate_workspace()

        ws = self.workspace_git
        ws.run("fetch", "origin")

        # Detach first so the branch can be deleted even if the clone is on it
        ws.run("checkout", "--quiet", "--detach")
        if self.branch_exists(dest_branch):
            ws.run("branch", "-D", dest_branch)

        if self.remote_branch_exists(dest_branch):
            ws.run("checkout", "--track", "-b", dest_branch, f"origin/{dest_branch}")
        else:
            ws.run("checkout", "-b", dest_branch, source_revision)

        # Overlay the source tree onto the branch, not a merge
        ws.run("checkout", source_revision, "--", ".")

        if hook is not None:
            logger.info("Running build hook in %s", self.workspace)
            hook(self.workspace)

        ws.run("add", "-f", "-A", ".")

        return BuildCheckout(
            branch=dest_branch,
            source_revision=source_revision,
            workspace=self.workspace,
        )

    def _recreate_workspace(self) -> None:
        if self.workspace.exists():
            shutil.rmtree(self.workspace)
        self.git.run("clone", str(self.config.source_root), str(self.workspace))

        source_config = Path(self.git.output("rev-parse", "--git-path", "config").strip())
        if not source_config.is_absolute():
            source_config = self.config.source_root / source_config
        shutil.copyfile(source_config, self.workspace / ".git" / "config")

    def commit_build(self, source_revision: str | None = None) -> bool:
        """Commit the staged build output in the workspace.

        Args:
            source_revision: Revision the build was made from. Defaults to
                the current source HEAD.

        Returns:
            True if a commit was made, False if there was nothing to commit.
        """
        target = source_revision or self.source_head()
        ws = self.workspace_git
        last_commit = ws.output("rev-parse", "HEAD").strip()

        if not self.has_staged_changes():
            logger.info("Build output unchanged; nothing to commit")
            return False

        composer = MessageComposer(ws)
        with composer.compose("Built from ", last_commit, target) as message:
            ws.run("commit", "-a", "-F", str(message))
        return True

    def push_build(self, dest_branch: str) -> None:
        """Push ``dest_branch`` from the workspace to origin."""
        ws = self.workspace_git
        ws.run("checkout", dest_branch)

        if self.has_upstream(dest_branch):
            ws.run("push", "origin", f"{dest_branch}:{dest_branch}")
        else:
            ws.run("push", "--set-upstream", "origin", dest_branch)
