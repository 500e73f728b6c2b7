"""Configuration for subtree sync and build deployment.

Values come from a YAML file and, on the command line, from option
overrides. Relative paths resolve against ``source_root``.

Environment variables:
    SUBTREE_DEPLOY_CONFIG — config file path (default: .subtree-deploy.yaml)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

DEFAULT_CONFIG_NAME = ".subtree-deploy.yaml"


def config_path() -> Path:
    """Return the config file path from the environment or the default."""
    return Path(os.environ.get("SUBTREE_DEPLOY_CONFIG", DEFAULT_CONFIG_NAME))


@dataclass(frozen=True)
class SubtreeDeployConfig:
    """Immutable settings shared by both workflows."""

    repository: str
    revision_file: str = "REVISION"
    prefix: str = "subtree"
    branch: str = "master"
    remote_name: str = "subtree"
    build_dir: str = ".build"
    git_command: str = "git"
    source_root: Path = field(default_factory=Path.cwd)

    def __post_init__(self):
        if not self.repository:
            raise ValueError("repository is required")
        object.__setattr__(self, "source_root", Path(self.source_root).resolve())

    @property
    def revision_path(self) -> Path:
        return self.source_root / self.revision_file

    @property
    def prefix_path(self) -> Path:
        return self.source_root / self.prefix

    @property
    def build_path(self) -> Path:
        return self.source_root / self.build_dir

    def relative(self, path: Path) -> str:
        """Express a path relative to source_root for use as a git pathspec."""
        try:
            return str(path.relative_to(self.source_root))
        except ValueError:
            return str(path)


CONFIG_KEYS = {f.name for f in fields(SubtreeDeployConfig)}


def read_config_file(path: Path | str) -> dict:
    """Read a YAML config file into a dict of config values.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the document is not a mapping or has unknown keys.
        yaml.YAMLError: If the YAML is malformed.
    """
    config_file = Path(path)
    with open(config_file) as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_file} is not a YAML mapping")

    unknown = sorted(set(data) - CONFIG_KEYS)
    if unknown:
        raise ValueError(f"Unknown keys in {config_file}: {', '.join(unknown)}")

    return data


def load_config(
    path: Path | str | None = None,
    overrides: dict | None = None,
) -> SubtreeDeployConfig:
    """Build a config from a YAML file plus explicit overrides.

    Args:
        path: Config file. Defaults to $SUBTREE_DEPLOY_CONFIG or
            .subtree-deploy.yaml, which is skipped silently when missing.
        overrides: Values that win over the file. None entries are ignored.

    Returns:
        The resolved SubtreeDeployConfig.
    """
    values: dict = {}
    if path is not None:
        values.update(read_config_file(path))
    else:
        default = config_path()
        if default.is_file():
            values.update(read_config_file(default))

    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value

    if not values.get("repository"):
        raise ValueError("repository is required (set it in the config file or pass --repository)")

    if "source_root" in values:
        values["source_root"] = Path(values["source_root"]).expanduser()

    return SubtreeDeployConfig(**values)
