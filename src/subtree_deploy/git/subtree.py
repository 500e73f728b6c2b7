"""Subtree sync: vendor an upstream branch under a prefix of the host repo.

The prefix is replaced wholesale on every update so the result never looks
like a merge. The vendored commit id is kept in the revision file, and the
update and the commit are separate steps so staged changes can be inspected
in between.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass

from subtree_deploy.config import SubtreeDeployConfig
from subtree_deploy.git.message import MessageComposer
from subtree_deploy.git.revision import RevisionStore
from subtree_deploy.git.runner import Git, ProcessError, ProcessRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubtreeUpdate:
    """Revision range produced by one update, consumed by commit_update."""

    previous_revision: str
    current_revision: str

    @property
    def changed(self) -> bool:
        return self.previous_revision != self.current_revision


class SubtreeSync:
    """Registers the upstream remote and keeps the prefix in sync with it."""

    def __init__(self, config: SubtreeDeployConfig, runner: ProcessRunner | None = None):
        self.config = config
        self.git = Git(runner or ProcessRunner(), config.git_command, config.source_root)
        self.revisions = RevisionStore(config.revision_path, self.git)
        self.composer = MessageComposer(self.git)

    @property
    def upstream_ref(self) -> str:
        return f"{self.config.remote_name}/{self.config.branch}"

    def current_revision(self) -> str | None:
        return self.revisions.current_revision()

    def next_revision(self) -> str:
        return self.revisions.next_revision(self.config.remote_name, self.config.branch)

    def remote_exists(self) -> bool:
        """Check whether the upstream remote is registered.

        A failing probe counts as "not registered", whatever the cause.
        """
        try:
            remotes = self.git.output("remote")
        except ProcessError as e:
            logger.debug("Remote probe failed: %s", e)
            return False
        return self.config.remote_name in remotes.split()

    def setup(self) -> None:
        """Register the upstream as a remote and fetch it.

        Raises:
            ProcessError: If the remote already exists or the fetch fails.
        """
        self.git.run("remote", "add", self.config.remote_name, self.config.repository)
        self.git.run("fetch", self.config.remote_name)
        logger.info("Registered remote %s -> %s", self.config.remote_name, self.config.repository)

    def clean(self) -> None:
        """Unregister the upstream remote."""
        self.git.run("remote", "remove", self.config.remote_name)

    def update(self, commit: str | None = None) -> SubtreeUpdate:
        """Replace the prefix with the tree of ``commit`` and record it.

        Args:
            commit: Revision to vendor. Defaults to <remote>/<branch>.

        Returns:
            The previous and newly recorded revisions. Nothing is committed.
        """
        cfg = self.config
        # Not atomic with setup(); concurrent callers can both try to add
        if not self.remote_exists():
            self.setup()

        self.git.run("fetch", cfg.remote_name)

        prefix = cfg.relative(cfg.prefix_path)
        self.git.run("rm", "-r", "-f", "-q", "--ignore-unmatch", "--", prefix)
        if cfg.prefix_path.exists():
            shutil.rmtree(cfg.prefix_path)

        treeish = commit or self.upstream_ref
        self.git.run("read-tree", f"--prefix={prefix.rstrip('/')}/", treeish)
        self.git.run("checkout", "--", prefix)

        previous = self.revisions.current_revision() or self._root_revision()

        revision = self.git.output("rev-parse", f"{treeish}^{{commit}}").strip()
        self.revisions.write(revision)
        self.git.run("add", "--", cfg.relative(cfg.revision_path))

        logger.info("Updated %s to %s (previous %s)", prefix, revision, previous)
        return SubtreeUpdate(previous_revision=previous, current_revision=revision)

    def _root_revision(self) -> str:
        """First commit reachable from the upstream branch."""
        roots = self.git.output("rev-list", "--max-parents=0", self.upstream_ref)
        return roots.strip().split("\n")[-1].strip()

    def commit_update(self, update: SubtreeUpdate, extra_files: list[str] | tuple[str, ...] = ()) -> None:
        """Commit the prefix, the revision file and ``extra_files``.

        Raises:
            ProcessError: If the commit fails, including when there is
                nothing to commit.
        """
        cfg = self.config
        header = f"Updated {cfg.remote_name} to "
        with self.composer.compose(header, update.previous_revision, update.current_revision) as message:
            self.git.run(
                "commit", "-F", str(message), "--",
                cfg.relative(cfg.prefix_path),
                cfg.relative(cfg.revision_path),
                *extra_files,
            )
