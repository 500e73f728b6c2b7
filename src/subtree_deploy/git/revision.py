"""Read and write the vendored revision file."""

from __future__ import annotations

from pathlib import Path

from subtree_deploy.git.runner import Git


class RevisionStore:
    """A single commit id persisted as plain text.

    The file holds only the currently vendored revision; no history is kept.
    """

    def __init__(self, path: Path | str, git: Git):
        self.path = Path(path)
        self._git = git

    def current_revision(self) -> str | None:
        """Return the trimmed revision, or None if the file is absent or empty."""
        if not self.path.exists():
            return None
        return self.path.read_text().strip() or None

    def write(self, revision: str) -> None:
        self.path.write_text(revision)

    def next_revision(self, remote_name: str, branch: str) -> str:
        """Resolve the tip of <remote_name>/<branch>.

        Raises:
            ProcessError: If the remote or branch is unknown.
        """
        return self._git.output("rev-parse", f"{remote_name}/{branch}").strip()
