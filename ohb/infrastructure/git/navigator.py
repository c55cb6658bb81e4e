"""
Git Commit Navigator.

ICommitNavigator backed by the git command line. The working copy is a
fresh clone; the commit sequence is the first-parent history of HEAD,
optionally restricted to commits touching the filtered paths.

Commands used:
    git clone [--branch <branch>] <url> <dir>
    git rev-list --first-parent HEAD [-- <paths>...]
    git checkout --quiet --detach <sha>
    git show -s --format=%H%x00%cn%x00%ct%x00%B <sha>
"""

import logging
import os
import shutil
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from ohb.domain.exceptions import RepositoryAccessError
from ohb.domain.interfaces.repository_navigation import ICommitNavigator
from ohb.domain.models.ontology import CommitMetadata
from ohb.domain.models.value_objects import RelativeFilePath, RepositoryCoordinates

logger = logging.getLogger(__name__)

_METADATA_FORMAT = "%H%x00%cn%x00%ct%x00%B"


class GitCommitNavigator(ICommitNavigator):
    """
    Steps a cloned working copy backwards through its commit history.

    Not thread-safe; each pipeline owns its own navigator and directory.
    initialize() deletes whatever is in the working directory, so callers
    must not run two navigators on the same directory at once.
    """

    def __init__(
        self,
        coordinates: RepositoryCoordinates,
        working_directory: Path,
        file_filters: Optional[Sequence[str]] = None,
        git_executable: str = "git",
        timeout_seconds: float = 600,
    ):
        self._coordinates = coordinates
        self._working_directory = Path(working_directory)
        self._file_filters = list(file_filters or [])
        self._git = git_executable
        self._timeout = timeout_seconds

        self._commits: List[str] = []
        self._position = -1

    @property
    def working_directory(self) -> Path:
        return self._working_directory

    @property
    def commits(self) -> List[str]:
        """Commit hashes on the traversed path, newest first."""
        return list(self._commits)

    def initialize(self) -> None:
        if self._working_directory.exists():
            logger.info(f"Removing existing working directory {self._working_directory}")
            try:
                shutil.rmtree(self._working_directory)
            except OSError as e:
                raise RepositoryAccessError(
                    f"Could not clear working directory {self._working_directory}"
                ) from e
        self._working_directory.parent.mkdir(parents=True, exist_ok=True)

        clone_args = ["clone"]
        if self._coordinates.branch:
            clone_args += ["--branch", self._coordinates.branch]
        clone_args += [self._coordinates.repository_url, str(self._working_directory)]
        logger.info(f"Cloning {self._coordinates.repository_url} into {self._working_directory}")
        self._run(*clone_args, cwd=self._working_directory.parent)

        rev_list_args = ["rev-list", "--first-parent", "HEAD"]
        if self._file_filters:
            rev_list_args += ["--"] + self._file_filters
        output = self._run(*rev_list_args)
        self._commits = [line for line in output.splitlines() if line.strip()]
        if not self._commits:
            raise RepositoryAccessError(
                f"No commits found in {self._coordinates.repository_url} for {self._file_filters or 'HEAD'}"
            )

        logger.debug(f"Found {len(self._commits)} commits to traverse")
        self._checkout(0)

    def get_current_commit_metadata(self) -> CommitMetadata:
        self._require_initialized()
        output = self._run("show", "-s", f"--format={_METADATA_FORMAT}", self._commits[self._position])
        try:
            commit_hash, committer, timestamp, message = output.split("\x00", 3)
            commit_time = datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
        except ValueError as e:
            raise RepositoryAccessError(f"Unexpected git show output: {output!r}") from e
        return CommitMetadata(
            commit_hash=commit_hash.strip(),
            committer_username=committer,
            commit_message=message.rstrip("\n"),
            commit_timestamp=commit_time,
        )

    def has_previous_commit(self) -> bool:
        self._require_initialized()
        return self._position + 1 < len(self._commits)

    def checkout_previous(self) -> None:
        if not self.has_previous_commit():
            raise RepositoryAccessError("No previous commit to check out")
        self._checkout(self._position + 1)

    def resolve_path(self, relative_path: RelativeFilePath) -> Path:
        return self._working_directory.joinpath(*relative_path.as_path().parts)

    # ═══════════════════════════════════════════════════════════════
    # Internals
    # ═══════════════════════════════════════════════════════════════

    def _checkout(self, position: int) -> None:
        self._run("checkout", "--quiet", "--detach", self._commits[position])
        self._position = position

    def _require_initialized(self) -> None:
        if self._position < 0:
            raise RepositoryAccessError("Navigator not initialized")

    def _run(self, *args: str, cwd: Optional[Path] = None) -> str:
        command = [self._git, *args]
        env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
        try:
            result = subprocess.run(
                command,
                cwd=str(cwd or self._working_directory),
                capture_output=True,
                text=True,
                timeout=self._timeout,
                env=env,
            )
        except subprocess.TimeoutExpired as e:
            raise RepositoryAccessError(f"git {args[0]} timed out") from e
        except FileNotFoundError as e:
            raise RepositoryAccessError("Git command not found") from e
        except OSError as e:
            raise RepositoryAccessError(f"git {args[0]} could not be run: {e}") from e

        if result.returncode != 0:
            raise RepositoryAccessError(f"git {args[0]} failed: {result.stderr.strip()}")
        return result.stdout


def git_navigator_factory(
    coordinates: RepositoryCoordinates,
    working_directory: Path,
    file_filters: Optional[Sequence[str]] = None,
) -> GitCommitNavigator:
    """CommitNavigatorFactory producing GitCommitNavigator instances."""
    return GitCommitNavigator(coordinates, working_directory, file_filters)
