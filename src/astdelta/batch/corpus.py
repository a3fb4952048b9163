"""Fixture identifiers of the form ``<project>-<commit-hash>/<path>``.

The project name may itself contain dashes; the commit hash is the last
dash-separated token before the first slash and must be 7 to 40 hex
characters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from astdelta.config.constants import FIXTURE_COMMIT_MAX_LEN, FIXTURE_COMMIT_MIN_LEN

_FIXTURE_RE = re.compile(
    rf"^(?P<project>[^/]+)-(?P<commit>[0-9a-fA-F]{{{FIXTURE_COMMIT_MIN_LEN},{FIXTURE_COMMIT_MAX_LEN}}})"
    r"/(?P<path>.+)$"
)


@dataclass(frozen=True, slots=True)
class FixtureId:
    project: str
    commit: str
    path: str

    @classmethod
    def parse(cls, text: str) -> FixtureId:
        """Parse ``"checkstyle-119fd4fb/src/Main.java"``.

        Raises:
            ValueError: if ``text`` does not follow the convention.
        """
        match = _FIXTURE_RE.match(text.strip().replace("\\", "/"))
        if match is None:
            raise ValueError(f"Not a fixture id (expected <project>-<commit>/<path>): {text!r}")
        return cls(
            project=match["project"],
            commit=match["commit"].lower(),
            path=match["path"].lstrip("/"),
        )

    @property
    def directory(self) -> str:
        return f"{self.project}-{self.commit}"

    def resolve(self, root: Path | str) -> Path:
        """Location of the fixture file below a corpus root."""
        return Path(root) / self.directory / self.path

    def __str__(self) -> str:
        return f"{self.directory}/{self.path}"
