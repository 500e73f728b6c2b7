"""Shared test fixtures for subtree-deploy.

Repositories are real git repos under tmp_path, created with an isolated
HOME so the user's git config never leaks in.
"""

import subprocess
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from subtree_deploy.config import SubtreeDeployConfig
from subtree_deploy.git.runner import ProcessError


def git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=True,
    )
    return result.stdout.strip()


@dataclass
class Repo:
    path: Path
    commits: list[str] = field(default_factory=list)

    def commit(self, files: dict[str, str], message: str) -> str:
        for name, content in files.items():
            target = self.path / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        git(self.path, "add", "-A")
        git(self.path, "commit", "-q", "-m", message)
        sha = git(self.path, "rev-parse", "HEAD")
        self.commits.append(sha)
        return sha

    def git(self, *args: str) -> str:
        return git(self.path, *args)


def init_repo(path: Path) -> Repo:
    path.mkdir(parents=True)
    git(path, "init", "-q", "-b", "main")
    return Repo(path)


class FakeRunner:
    """Records commands instead of running them.

    ``outputs`` maps exact git argument tuples to stdout; ``failing`` holds
    argument prefixes that raise ProcessError.
    """

    def __init__(self):
        self.commands: list[list[str]] = []
        self.cwds: list = []
        self.outputs: dict[tuple[str, ...], str] = {}
        self.failing: list[tuple[str, ...]] = []

    def run(self, command, cwd=None):
        self.run_captured(command, cwd)

    def run_captured(self, command, cwd=None):
        self.commands.append(list(command))
        self.cwds.append(cwd)
        args = tuple(command[1:])
        for prefix in self.failing:
            if args[:len(prefix)] == prefix:
                raise ProcessError(list(command), 1)
        return self.outputs.get(args, "")

    def git_args(self) -> list[tuple[str, ...]]:
        return [tuple(c[1:]) for c in self.commands]


@pytest.fixture(autouse=True)
def isolated_git(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "t@t")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "t@t")
    monkeypatch.delenv("GIT_DIR", raising=False)
    monkeypatch.delenv("GIT_WORK_TREE", raising=False)
    monkeypatch.delenv("SUBTREE_DEPLOY_CONFIG", raising=False)


@pytest.fixture
def upstream(tmp_path):
    """Upstream repo with three commits on main."""
    repo = init_repo(tmp_path / "upstream")
    repo.commit({"README.md": "upstream v1\n", "lib/a.txt": "a1\n"}, "initial import")
    repo.commit({"lib/b.txt": "b1\n"}, "add b")
    repo.commit({"lib/a.txt": "a2\n"}, "bump a")
    return repo


@pytest.fixture
def host(tmp_path):
    """Host repo with a bare origin it has pushed main to."""
    repo = init_repo(tmp_path / "host")
    repo.commit({"app.py": "print('hello')\n", "docs/index.md": "# docs\n"}, "host initial")

    origin = tmp_path / "origin.git"
    git(tmp_path, "init", "-q", "--bare", "-b", "main", str(origin))
    repo.git("remote", "add", "origin", str(origin))
    repo.git("push", "-q", "-u", "origin", "main")
    return repo


@pytest.fixture
def config(tmp_path, upstream, host):
    return SubtreeDeployConfig(
        repository=str(upstream.path),
        branch="main",
        prefix="vendor/lib",
        source_root=host.path,
        build_dir=str(tmp_path / "build"),
    )


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def run_git():
    return git
