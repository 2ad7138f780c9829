"""Git tag and commit-range queries.

GitGateway is the capability the update flow needs from git. Repository
implements it with the git binary; tests substitute an in-memory fake.
All fallible operations return Result types. A tag that does not exist is a
normal Ok(None), not an error.

Usage:
    repo = Repository(Path("/path/to/project"))

    match repo.find_tag_matching("jetty-9.4.0"):
        case Ok(None):
            print("no such tag")
        case Ok(tag):
            print(repo.get_tag_commit_id(tag))
        case Err(e):
            print(f"git failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from vtext.core.result import Err, Ok, Result
from vtext.platform.process import ProcessError
from vtext.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

# git log record layout: <sha> NUL <raw body> RS
_FIELD_SEP = "\x00"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = "--format=%H%x00%B%x1e"

__all__ = [
    "Commit",
    "GitError",
    "GitGateway",
    "Repository",
    "parse_log",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code (-1 when git could not run)
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class Commit:
    sha: str
    message: str

    @property
    def short_sha(self) -> str:
        return self.sha[:8]

    @property
    def subject(self) -> str:
        for line in self.message.splitlines():
            if line.strip():
                return line.strip()
        return ""


class GitGateway(Protocol):
    """Tag/commit graph queries used by the update flow."""

    def fetch_tags(self) -> bool:
        """Refresh local tags from the remote. Never raises."""
        ...

    def list_tags(self) -> Result[list[str], GitError]: ...

    def find_tag_matching(self, version_id: str) -> Result[str | None, GitError]:
        """Tag named exactly `version_id`, or Ok(None) when there is none."""
        ...

    def get_tag_commit_id(self, tag: str) -> Result[str, GitError]: ...

    def head_commit_id(self) -> Result[str, GitError]: ...

    def commits_in_range(self, from_commit: str, to_commit: str) -> Result[list[Commit], GitError]:
        """Commits reachable from `to_commit` but not `from_commit`, newest first."""
        ...


class Repository:
    """GitGateway backed by the git binary.

    Attributes:
        path: Working directory inside the repository
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def fetch_tags(self) -> bool:
        return isinstance(self._run(["fetch", "--tags"]), Ok)

    def list_tags(self) -> Result[list[str], GitError]:
        result = self._run(["tag", "--list"])
        match result:
            case Err(e):
                return Err(self._error("tag --list", e, "failed to list tags"))
            case Ok(stdout):
                return Ok([ln.strip() for ln in stdout.splitlines() if ln.strip()])

    def find_tag_matching(self, version_id: str) -> Result[str | None, GitError]:
        result = self._run(["tag", "--list", version_id])
        match result:
            case Err(e):
                return Err(self._error("tag --list", e, f"failed to look up tag {version_id}"))
            case Ok(stdout):
                for line in stdout.splitlines():
                    if line.strip() == version_id:
                        return Ok(version_id)
                return Ok(None)

    def get_tag_commit_id(self, tag: str) -> Result[str, GitError]:
        # rev-list dereferences annotated tags down to the commit
        return self._rev(["rev-list", "-n", "1", f"refs/tags/{tag}"], what=f"tag {tag}")

    def head_commit_id(self) -> Result[str, GitError]:
        return self._rev(["rev-parse", "HEAD"], what="HEAD")

    def commits_in_range(self, from_commit: str, to_commit: str) -> Result[list[Commit], GitError]:
        rev_range = f"{from_commit}..{to_commit}" if from_commit else to_commit
        result = self._run(["log", _LOG_FORMAT, rev_range])
        match result:
            case Err(e):
                return Err(self._error("log", e, f"failed to list commits in {rev_range}"))
            case Ok(stdout):
                return Ok(parse_log(stdout))

    def _rev(self, args: list[str], *, what: str) -> Result[str, GitError]:
        result = self._run(args)
        match result:
            case Err(e):
                return Err(self._error(args[0], e, f"failed to resolve {what}"))
            case Ok(stdout):
                sha = stdout.strip()
                if not sha:
                    return Err(GitError(command=args[0], message=f"{what} resolves to no commit"))
                return Ok(sha)

    def _error(self, command: str, e: ProcessError, fallback: str) -> GitError:
        return GitError(
            command=command,
            message=e.stderr.strip() or fallback,
            returncode=e.returncode,
        )

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = _GIT_NETWORK_TIMEOUT_SECONDS if command == "fetch" else _GIT_TIMEOUT_SECONDS
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)


def parse_log(output: str) -> list[Commit]:
    """Parse `git log --format=%H%x00%B%x1e` output, keeping git's order."""
    commits: list[Commit] = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record.strip():
            continue
        sha, _, message = record.partition(_FIELD_SEP)
        commits.append(Commit(sha=sha.strip(), message=message.strip()))
    return commits
