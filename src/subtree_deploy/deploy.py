"""Single entry point over subtree sync and build deployment."""

from __future__ import annotations

from subtree_deploy.config import SubtreeDeployConfig
from subtree_deploy.git.build import BuildCheckout, BuildDeployPipeline, BuildHook
from subtree_deploy.git.runner import ProcessRunner
from subtree_deploy.git.subtree import SubtreeSync, SubtreeUpdate


class SubtreeDeploy:
    """Both workflows sharing one config and one process runner.

    The two workflows are independent: a subtree sync never touches the
    build workspace, and a build never touches the prefix.
    """

    def __init__(self, config: SubtreeDeployConfig, runner: ProcessRunner | None = None):
        self.config = config
        self.runner = runner or ProcessRunner()
        self.subtree = SubtreeSync(config, self.runner)
        self.pipeline = BuildDeployPipeline(config, self.runner)

    def current_revision(self) -> str | None:
        return self.subtree.current_revision()

    def next_revision(self) -> str:
        return self.subtree.next_revision()

    def setup(self) -> None:
        self.subtree.setup()

    def clean(self) -> None:
        self.subtree.clean()

    def update(self, commit: str | None = None) -> SubtreeUpdate:
        return self.subtree.update(commit)

    def commit_update(self, update: SubtreeUpdate, extra_files: list[str] | tuple[str, ...] = ()) -> None:
        self.subtree.commit_update(update, extra_files)

    def sync(self, commit: str | None = None, extra_files: list[str] | tuple[str, ...] = ()) -> SubtreeUpdate:
        """Update the prefix and commit it in one go."""
        update = self.subtree.update(commit)
        self.subtree.commit_update(update, extra_files)
        return update

    def build(self, dest_branch: str, hook: BuildHook | None = None) -> BuildCheckout:
        return self.pipeline.build(dest_branch, hook)

    def commit_build(self, checkout: BuildCheckout | None = None) -> bool:
        source_revision = checkout.source_revision if checkout else None
        return self.pipeline.commit_build(source_revision)

    def push_build(self, dest_branch: str) -> None:
        self.pipeline.push_build(dest_branch)

    def deploy(self, dest_branch: str, hook: BuildHook | None = None) -> bool:
        """Build, commit and push ``dest_branch``.

        Returns:
            Whether the build produced a new commit.
        """
        checkout = self.pipeline.build(dest_branch, hook)
        committed = self.pipeline.commit_build(checkout.source_revision)
        self.pipeline.push_build(dest_branch)
        return committed
