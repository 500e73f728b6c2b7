"""subtree-deploy — vendor an upstream subtree and push build output to a deploy branch."""

from subtree_deploy.config import SubtreeDeployConfig, load_config
from subtree_deploy.deploy import SubtreeDeploy
from subtree_deploy.git.runner import ProcessError

__all__ = [
    "ProcessError",
    "SubtreeDeploy",
    "SubtreeDeployConfig",
    "load_config",
]
