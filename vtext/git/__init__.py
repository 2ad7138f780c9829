"""Git operations module.

- GitGateway: the tag/commit queries the update flow relies on
- Repository: GitGateway implemented with the git binary
- IssueMatcher / populate_issues_for_range: issue extraction from a commit range

Usage:
    from vtext.git import IssueMatcher, Repository, populate_issues_for_range

    repo = Repository(Path("."))
    release = Release("jetty-9.4.1")
    populate_issues_for_range(repo, prior_sha, "HEAD", release, IssueMatcher.default())
"""

from vtext.git.issues import DEFAULT_ISSUE_PATTERNS, IssueMatcher, populate_issues_for_range
from vtext.git.repository import Commit, GitError, GitGateway, Repository, parse_log

__all__ = [
    # issues
    "DEFAULT_ISSUE_PATTERNS",
    "IssueMatcher",
    "populate_issues_for_range",
    # repository
    "Commit",
    "GitError",
    "GitGateway",
    "Repository",
    "parse_log",
]
