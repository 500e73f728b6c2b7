"""Commit message composition from a revision range.

Message layout:

    <header><hash> <author date>

    <abbrev hash> <subject>
    <abbrev hash> <subject>
    ...

The log section appears only when a starting revision is known, and lists
commits in git's default (newest-first) order.
"""

from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from subtree_deploy.git.runner import Git

MESSAGE_FILE_PREFIX = "subtree-deploy-message-"


class MessageComposer:
    """Builds commit messages by asking git about a revision range."""

    def __init__(self, git: Git):
        self._git = git

    def compose_text(
        self,
        header: str,
        from_revision: str | None,
        to_revision: str,
    ) -> str:
        """Return the message text for the range (from_revision, to_revision]."""
        metadata = self._git.output(
            "show", "-s", "--format=%H %ad", to_revision,
        ).strip().split("\n")[0]
        lines = [f"{header}{metadata}"]

        if from_revision is not None:
            log = self._git.output(
                "log", "--format=%h %s", f"{from_revision}..{to_revision}",
            )
            lines.append("")
            lines.extend(line for line in log.strip().split("\n") if line.strip())

        return "\n".join(lines) + "\n"

    @contextmanager
    def compose(
        self,
        header: str,
        from_revision: str | None,
        to_revision: str,
    ) -> Iterator[Path]:
        """Write the composed message to a temporary file and yield its path.

        The text is echoed to stdout first. The file is removed when the
        block exits, including when the consuming command raised.
        """
        text = self.compose_text(header, from_revision, to_revision)
        print(text)

        fd, name = tempfile.mkstemp(prefix=MESSAGE_FILE_PREFIX, suffix=".txt")
        path = Path(name)
        try:
            with os.fdopen(fd, "w") as f:
                f.write(text)
            yield path
        finally:
            path.unlink(missing_ok=True)
