"""Tests for the VERSION.txt update flow against an in-memory git."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from pathlib import Path

import pytest

from vtext.core.result import Err, Ok
from vtext.output.console import MockConsole
from vtext.test._fakes import FakeGit
from vtext.update.options import UpdateOptions
from vtext.update.service import UpdateOutcome, update_version_text
from vtext.version.errors import VersionTextError

RELEASE_DAY = date(2017, 1, 20)


def _options(tmp_path: Path, **overrides: object) -> UpdateOptions:
    options = UpdateOptions(
        version="1.0",
        basedir=tmp_path,
        input_file=tmp_path / "VERSION.txt",
        output_file=tmp_path / "target" / "VERSION.txt",
        text_key="jetty-VERSION",
        tag_key="jetty-VERSION",
    )
    return replace(options, **overrides)  # type: ignore[arg-type]


def _history() -> FakeGit:
    """jetty-0.9 tagged at c1, head at c5 with two issue commits in between."""
    git = FakeGit()
    git.commit("JETTY-50 - Released fix")
    git.tag("jetty-0.9")
    git.commit("JETTY-100 - Fix request parsing")
    git.commit("Merge branch 'jetty-9.4.x'")
    git.commit("JETTY-101 - Fix header folding")
    git.commit("Update documentation")
    return git


def _run(
    options: UpdateOptions,
    git: FakeGit,
    console: MockConsole | None = None,
) -> UpdateOutcome:
    result = update_version_text(
        options, git=git, console=console or MockConsole(), today=lambda: RELEASE_DAY
    )
    assert isinstance(result, Ok), result
    return result.value


def _fail(options: UpdateOptions, git: FakeGit) -> VersionTextError:
    result = update_version_text(options, git=git, console=MockConsole(), today=lambda: RELEASE_DAY)
    assert isinstance(result, Err), result
    return result.error


def _output(options: UpdateOptions) -> str:
    return options.output_file.read_text(encoding="utf-8")


class TestSkip:
    def test_skip_flag(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("jetty-1.0\n", encoding="utf-8")
        options = _options(tmp_path, skip=True)
        git = _history()

        outcome = _run(options, git)

        assert outcome.status == "skipped"
        assert not options.output_file.exists()
        assert git.calls == []

    def test_missing_input(self, tmp_path: Path) -> None:
        options = _options(tmp_path)
        console = MockConsole()

        outcome = _run(options, _history(), console)

        assert outcome.status == "skipped"
        assert not options.output_file.exists()
        assert not console.has_error()


class TestBootstrap:
    def test_empty_document_gets_empty_release(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("", encoding="utf-8")
        options = _options(tmp_path)
        git = FakeGit()
        console = MockConsole()

        outcome = _run(options, git, console)

        assert outcome.status == "bootstrapped"
        assert outcome.version_id == "jetty-1.0"
        assert _output(options) == "jetty-1.0\n"
        assert git.calls == []
        assert console.has_warning()

    def test_prior_tag_missing(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("jetty-0.9\n + JETTY-50 x\n", encoding="utf-8")
        options = _options(tmp_path)
        console = MockConsole()

        outcome = _run(options, FakeGit(), console)

        assert outcome.status == "bootstrapped"
        assert _output(options) == "jetty-1.0\n\njetty-0.9\n + JETTY-50 x\n"
        assert console.find("Unable to find git tag id for prior version id [jetty-0.9]")
        assert outcome.commit_command == (
            'git commit -m "Creating new version jetty-1.0 in VERSION.txt" VERSION.txt'
        )

    def test_input_is_not_modified(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("", encoding="utf-8")
        options = _options(tmp_path)

        _run(options, FakeGit())

        assert (tmp_path / "VERSION.txt").read_text(encoding="utf-8") == ""


class TestUpdate:
    def test_existing_release_collects_range_issues(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("jetty-1.0\n\njetty-0.9\n", encoding="utf-8")
        options = _options(tmp_path)
        console = MockConsole()

        outcome = _run(options, _history(), console)

        assert outcome.status == "updated"
        assert outcome.issues_added == 2
        assert _output(options) == (
            "jetty-1.0\n"
            " + JETTY-101 Fix header folding\n"
            " + JETTY-100 Fix request parsing\n"
            "\n"
            "jetty-0.9\n"
        )
        assert console.has_success()
        assert console.find(
            'git commit -m "Updating version jetty-1.0 in VERSION.txt" VERSION.txt'
        )

    def test_new_release_is_prepended(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text(
            "jetty-0.9 - 08 December 2016\n + JETTY-50 Released fix\n", encoding="utf-8"
        )
        options = _options(tmp_path)

        outcome = _run(options, _history())

        assert outcome.status == "created"
        assert _output(options) == (
            "jetty-1.0\n"
            " + JETTY-101 Fix header folding\n"
            " + JETTY-100 Fix request parsing\n"
            "\n"
            "jetty-0.9 - 08 December 2016\n"
            " + JETTY-50 Released fix\n"
        )

    def test_rerun_adds_nothing(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("jetty-1.0\n\njetty-0.9\n", encoding="utf-8")
        options = _options(tmp_path, copy_generated=True)

        _run(options, _history())
        first = _output(options)
        again = _run(options, _history())

        assert again.issues_added == 0
        assert _output(options) == first

    def test_existing_issues_are_kept(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text(
            "jetty-1.0\n + JETTY-100 Hand written\n\njetty-0.9\n", encoding="utf-8"
        )
        options = _options(tmp_path)

        outcome = _run(options, _history())

        assert outcome.issues_added == 1
        assert _output(options).startswith(
            "jetty-1.0\n + JETTY-100 Hand written\n + JETTY-101 Fix header folding\n"
        )

    def test_separate_tag_key(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("jetty-1.0\n\njetty-0.9\n", encoding="utf-8")
        options = _options(tmp_path, tag_key="v-VERSION")
        git = _history()
        git.tags = {"v-0.9": git.commits[0].sha}

        outcome = _run(options, git)

        assert outcome.issues_added == 2
        assert "find_tag_matching v-0.9" in git.calls


class TestDate:
    def test_no_date_by_default(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("jetty-1.0\n\njetty-0.9\n", encoding="utf-8")
        options = _options(tmp_path)

        _run(options, _history())

        assert _output(options).startswith("jetty-1.0\n")

    def test_date_stamped_when_enabled(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("jetty-1.0\n\njetty-0.9\n", encoding="utf-8")
        options = _options(tmp_path, update_date=True)

        _run(options, _history())

        assert _output(options).startswith("jetty-1.0 - 20 January 2017\n")

    def test_existing_date_is_kept(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text(
            "jetty-1.0 - 01 January 2017\n\njetty-0.9\n", encoding="utf-8"
        )
        options = _options(tmp_path, update_date=True)

        _run(options, _history())

        assert _output(options).startswith("jetty-1.0 - 01 January 2017\n")


class TestSortExisting:
    def test_only_existing_releases_are_sorted(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text(
            "jetty-1.0\n\njetty-0.9\n + JETTY-200 Second\n + JETTY-100 First\n",
            encoding="utf-8",
        )
        options = _options(tmp_path, sort_existing=True)

        _run(options, _history())

        assert _output(options) == (
            "jetty-1.0\n"
            " + JETTY-101 Fix header folding\n"
            " + JETTY-100 Fix request parsing\n"
            "\n"
            "jetty-0.9\n"
            " + JETTY-100 First\n"
            " + JETTY-200 Second\n"
        )


class TestRefreshTags:
    def test_fetch_failure_is_fatal(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("jetty-1.0\n\njetty-0.9\n", encoding="utf-8")
        options = _options(tmp_path, refresh_tags=True)
        git = _history()
        git.fetch_ok = False

        error = _fail(options, git)

        assert error.kind == "unable_to_fetch_tags"
        assert not options.output_file.exists()

    def test_current_tag_bounds_the_range(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("jetty-1.0\n\njetty-0.9\n", encoding="utf-8")
        options = _options(tmp_path, refresh_tags=True)
        git = _history()
        git.remote_tags = {"jetty-1.0": git.commits[3].sha}
        git.commit("JETTY-102 - After the release")

        outcome = _run(options, git)

        assert git.calls[0] == "fetch_tags"
        assert outcome.issues_added == 2
        assert "JETTY-102" not in _output(options)

    def test_without_refresh_head_bounds_the_range(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("jetty-1.0\n\njetty-0.9\n", encoding="utf-8")
        options = _options(tmp_path)
        git = _history()
        git.tag("jetty-1.0", git.commits[3].sha)
        git.commit("JETTY-102 - After the release")

        outcome = _run(options, git)

        assert "fetch_tags" not in git.calls
        assert outcome.issues_added == 3


class TestFatal:
    def test_prior_version_not_conforming(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("jetty-1.0\n\njetty-bogus\n", encoding="utf-8")
        options = _options(tmp_path)

        error = _fail(options, _history())

        assert error.kind == "invalid_version_id"
        assert "jetty-bogus" in error.message
        assert not options.output_file.exists()

    def test_malformed_document(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("not a header\n", encoding="utf-8")
        options = _options(tmp_path)

        error = _fail(options, _history())

        assert error.kind == "malformed_document"
        assert not options.output_file.exists()

    @pytest.mark.parametrize("field", ["text_key", "tag_key"])
    def test_invalid_key(self, tmp_path: Path, field: str) -> None:
        (tmp_path / "VERSION.txt").write_text("", encoding="utf-8")
        options = _options(tmp_path, **{field: "jetty"})

        assert _fail(options, FakeGit()).kind == "invalid_pattern"

    def test_invalid_issue_pattern(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("", encoding="utf-8")
        options = _options(tmp_path, issue_patterns=("(broken",))

        assert _fail(options, FakeGit()).kind == "invalid_input"

    def test_git_failure(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("jetty-1.0\n\njetty-0.9\n", encoding="utf-8")
        options = _options(tmp_path)

        error = _fail(options, FakeGit(fail=True))

        assert error.kind == "git_failed"
        assert not options.output_file.exists()


class TestGenerate:
    def test_copy_generated_overwrites_input(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("jetty-1.0\n\njetty-0.9\n", encoding="utf-8")
        options = _options(tmp_path, copy_generated=True)

        _run(options, _history())

        assert (tmp_path / "VERSION.txt").read_text(encoding="utf-8") == _output(options)

    def test_attach_publishes_artifact(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("jetty-1.0\n\njetty-0.9\n", encoding="utf-8")
        options = _options(tmp_path, attach=True)

        outcome = _run(options, _history())

        expected = tmp_path / "target" / "artifacts" / "jetty-1.0-version.txt"
        assert outcome.attached_path == expected
        assert expected.read_text(encoding="utf-8") == _output(options)

    def test_output_unwritable(self, tmp_path: Path) -> None:
        (tmp_path / "VERSION.txt").write_text("", encoding="utf-8")
        (tmp_path / "target").write_text("blocker", encoding="utf-8")
        options = _options(tmp_path)

        error = _fail(options, FakeGit())

        assert error.kind == "io_failed"
