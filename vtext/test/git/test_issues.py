"""Tests for git/issues.py."""

from __future__ import annotations

import pytest

from vtext.core.result import Err, Ok
from vtext.git.issues import IssueMatcher, populate_issues_for_range
from vtext.git.repository import Commit
from vtext.test._fakes import FakeGit
from vtext.version.model import Issue, Release


@pytest.fixture
def matcher() -> IssueMatcher:
    return IssueMatcher.default()


class TestDefaultPatterns:
    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("Issue #123 - Fix the thing", Issue("123", "Fix the thing")),
            ("Fixes #123: Fix the thing", Issue("123", "Fix the thing")),
            ("closes #7", Issue("7", "")),
            ("#456 Tidy imports", Issue("456", "Tidy imports")),
            ("[JETTY-100] Fix the thing", Issue("JETTY-100", "Fix the thing")),
            ("JETTY-100 - Fix the thing", Issue("JETTY-100", "Fix the thing")),
            ("Bug 12345 - Fix the thing", Issue("12345", "Fix the thing")),
            ("  - JETTY-5: bulleted", Issue("JETTY-5", "bulleted")),
            ("JETTY-100", Issue("JETTY-100", "")),
        ],
    )
    def test_match_line(self, matcher: IssueMatcher, line: str, expected: Issue) -> None:
        assert matcher.match_line(line) == expected

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "Merge branch 'master'",
            "Update README",
            "see issue 12",
            "#12abc",
            "UTF-8 decoding of query strings",
            "CVE-2021-28165 fix for TLS",
            "SHA-256 checksums for dist",
            "HTTP-2 tidy",
            "JETTY-100 Fix without separator",
        ],
    )
    def test_no_match(self, matcher: IssueMatcher, line: str) -> None:
        assert matcher.match_line(line) is None


class TestCustomPatterns:
    def test_empty_selects_defaults(self) -> None:
        result = IssueMatcher.from_patterns([])
        assert result == Ok(IssueMatcher.default())

    def test_custom_pattern(self) -> None:
        result = IssueMatcher.from_patterns([r"^GH-(?P<id>\d+)\s+(?P<text>.*)$"])

        assert isinstance(result, Ok)
        assert result.value.match_line("GH-9 Fix it") == Issue("9", "Fix it")
        assert result.value.match_line("JETTY-9 Fix it") is None

    def test_pattern_without_text_group(self) -> None:
        result = IssueMatcher.from_patterns([r"^T(?P<id>\d+)"])

        assert isinstance(result, Ok)
        assert result.value.match_line("T42 whatever") == Issue("42", "")

    def test_invalid_regex(self) -> None:
        result = IssueMatcher.from_patterns(["(unclosed"])

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_input"
        assert result.error.hint == "(unclosed"

    def test_missing_id_group(self) -> None:
        result = IssueMatcher.from_patterns([r"^JETTY-\d+"])

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_input"


class TestIssuesIn:
    def test_body_reference_borrows_subject(self, matcher: IssueMatcher) -> None:
        commit = Commit(sha="a", message="Fix parser crash\n\nFixes #42")
        assert list(matcher.issues_in(commit)) == [Issue("42", "Fix parser crash")]

    def test_subject_only_reference_keeps_empty_text(self, matcher: IssueMatcher) -> None:
        commit = Commit(sha="a", message="#42")
        assert list(matcher.issues_in(commit)) == [Issue("42", "")]

    def test_multiple_references(self, matcher: IssueMatcher) -> None:
        commit = Commit(sha="a", message="[JETTY-1] first\n\nJETTY-2 - second\nnothing here")
        assert [i.id for i in matcher.issues_in(commit)] == ["JETTY-1", "JETTY-2"]


class TestPopulateIssuesForRange:
    def _history(self) -> tuple[FakeGit, str, str]:
        git = FakeGit()
        base = git.commit("JETTY-1 - already released")
        git.commit("JETTY-2 - older change")
        git.commit("Merge branch 'x'")
        head = git.commit("JETTY-3 - newer change")
        return git, base, head

    def test_newest_first(self, matcher: IssueMatcher) -> None:
        git, base, head = self._history()
        release = Release("jetty-1.1")

        result = populate_issues_for_range(git, base, head, release, matcher)

        assert result == Ok(2)
        assert release.issues == [
            Issue("JETTY-3", "newer change"),
            Issue("JETTY-2", "older change"),
        ]

    def test_idempotent(self, matcher: IssueMatcher) -> None:
        git, base, head = self._history()
        release = Release("jetty-1.1")

        populate_issues_for_range(git, base, head, release, matcher)
        again = populate_issues_for_range(git, base, head, release, matcher)

        assert again == Ok(0)
        assert len(release.issues) == 2

    def test_existing_issues_keep_their_place(self, matcher: IssueMatcher) -> None:
        git, base, head = self._history()
        release = Release("jetty-1.1", issues=[Issue("JETTY-2", "hand written"), Issue("", "Note")])

        result = populate_issues_for_range(git, base, head, release, matcher)

        assert result == Ok(1)
        assert release.issues == [
            Issue("JETTY-2", "hand written"),
            Issue("", "Note"),
            Issue("JETTY-3", "newer change"),
        ]

    def test_git_error_propagates(self, matcher: IssueMatcher) -> None:
        git = FakeGit(fail=True)
        release = Release("jetty-1.1")

        result = populate_issues_for_range(git, "a", "b", release, matcher)

        assert isinstance(result, Err)
        assert release.issues == []
