"""Git module — subtree sync and build deployment built on the git CLI."""

from subtree_deploy.git.build import BuildCheckout, BuildDeployPipeline
from subtree_deploy.git.message import MessageComposer
from subtree_deploy.git.revision import RevisionStore
from subtree_deploy.git.runner import Git, ProcessError, ProcessRunner
from subtree_deploy.git.subtree import SubtreeSync, SubtreeUpdate

__all__ = [
    "BuildCheckout",
    "BuildDeployPipeline",
    "Git",
    "MessageComposer",
    "ProcessError",
    "ProcessRunner",
    "RevisionStore",
    "SubtreeSync",
    "SubtreeUpdate",
]
