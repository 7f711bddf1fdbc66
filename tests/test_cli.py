"""Tests for monorelease.cli."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner
from helpers import FakeAffectedSource, FakePublisher, FakeTagSource, gh_failure, turbo_report

from monorelease.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestChangeset:
    """Tests for the changeset command."""

    @patch("monorelease.cli.TurboAffectedPackages")
    def test_writes_changeset(
        self, mock_source: MagicMock, runner: CliRunner, changeset_dir: Path
    ) -> None:
        """Description argument and PR env vars end up in the file."""
        mock_source.return_value = FakeAffectedSource(turbo_report("@repo/ui", "web"))

        result = runner.invoke(
            cli,
            ["changeset", "Add button"],
            env={"PR_NUMBER": "42", "GITHUB_REPOSITORY": "org/repo"},
        )

        assert result.exit_code == 0, result.output
        files = list(changeset_dir.glob("auto-*.md"))
        assert len(files) == 1
        assert files[0].read_text() == (
            '---\n"@repo/ui": minor\n"web": minor\n---\n\n'
            "[#42](https://github.com/org/repo/pull/42)\n\nAdd button\n"
        )
        assert "Changeset generated successfully" in result.output

    @patch("monorelease.cli.TurboAffectedPackages")
    def test_detection_failure_exits_zero(
        self, mock_source: MagicMock, runner: CliRunner, changeset_dir: Path
    ) -> None:
        mock_source.return_value = FakeAffectedSource(
            error=subprocess.CalledProcessError(1, ["pnpm"], stderr="no turbo")
        )

        result = runner.invoke(cli, ["changeset"], env={"PR_NUMBER": None})

        assert result.exit_code == 0
        assert list(changeset_dir.iterdir()) == []
        assert "Exiting gracefully" in result.output

    @patch("monorelease.cli.TurboAffectedPackages")
    def test_malformed_report_exits_one(
        self, mock_source: MagicMock, runner: CliRunner, changeset_dir: Path
    ) -> None:
        mock_source.return_value = FakeAffectedSource(
            '{"packages": {"items": [{"version": "1.0.0"}]}}'
        )

        result = runner.invoke(cli, ["changeset"])

        assert result.exit_code == 1
        assert "ERROR: Error generating changeset" in result.output

    @patch("monorelease.cli.TurboAffectedPackages")
    def test_write_failure_exits_one(
        self,
        mock_source: MagicMock,
        runner: CliRunner,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        mock_source.return_value = FakeAffectedSource(turbo_report("web"))

        result = runner.invoke(cli, ["changeset"])

        assert result.exit_code == 1

    @patch("monorelease.cli.TurboAffectedPackages")
    def test_uses_configured_command_and_exclusions(
        self, mock_source: MagicMock, runner: CliRunner, changeset_dir: Path
    ) -> None:
        (changeset_dir.parent / "monorelease.toml").write_text(
            '[changeset]\nbump = "patch"\nexclude = ["web"]\n'
            'affected_command = ["turbo", "ls", "--affected", "--output", "json"]\n'
        )
        mock_source.return_value = FakeAffectedSource(turbo_report("web", "docs"))

        result = runner.invoke(cli, ["changeset", "Tweak"], env={"PR_NUMBER": None})

        assert result.exit_code == 0, result.output
        mock_source.assert_called_once_with(["turbo", "ls", "--affected", "--output", "json"])
        (written,) = changeset_dir.glob("auto-*.md")
        assert written.read_text() == '---\n"docs": patch\n---\n\nTweak\n'


class TestRelease:
    """Tests for the release command."""

    @patch("monorelease.cli.GhReleasePublisher")
    @patch("monorelease.cli.GitTagSource")
    def test_success_exits_zero(
        self,
        mock_tags: MagicMock,
        mock_publisher: MagicMock,
        runner: CliRunner,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        mock_tags.return_value = FakeTagSource(["docs@1.0.1", "@repo/ui@0.3.0"])
        publisher = FakePublisher()
        mock_publisher.return_value = publisher
        summary = tmp_path / "summary.md"

        result = runner.invoke(
            cli,
            ["release"],
            env={"GITHUB_STEP_SUMMARY": str(summary), "GITHUB_REPOSITORY": "o/r"},
        )

        assert result.exit_code == 0, result.output
        assert publisher.created == ["docs@1.0.1"]
        assert "Successfully created 1 release(s)" in result.output
        assert "- ✅ [docs@1.0.1](https://github.com/o/r/releases/tag/docs%401.0.1)" in (
            summary.read_text()
        )

    @patch("monorelease.cli.GhReleasePublisher")
    @patch("monorelease.cli.GitTagSource")
    def test_partial_failure_exits_one(
        self,
        mock_tags: MagicMock,
        mock_publisher: MagicMock,
        runner: CliRunner,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        mock_tags.return_value = FakeTagSource(["docs@1.0.1", "web@2.0.0"])
        publisher = FakePublisher({"docs@1.0.1": gh_failure("HTTP 422")})
        mock_publisher.return_value = publisher

        result = runner.invoke(cli, ["release"], env={"GITHUB_STEP_SUMMARY": None})

        assert result.exit_code == 1
        assert publisher.created == ["web@2.0.0"]
        assert "1 release(s) failed" in result.output

    @patch("monorelease.cli.GhReleasePublisher")
    @patch("monorelease.cli.GitTagSource")
    def test_no_tags_exits_zero(
        self,
        mock_tags: MagicMock,
        mock_publisher: MagicMock,
        runner: CliRunner,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        mock_tags.return_value = FakeTagSource([])
        publisher = FakePublisher()
        mock_publisher.return_value = publisher

        result = runner.invoke(cli, ["release"], env={"GITHUB_STEP_SUMMARY": None})

        assert result.exit_code == 0
        assert publisher.calls == []
        assert "No tags found at HEAD" in result.output

    @patch("monorelease.cli.GhReleasePublisher")
    @patch("monorelease.cli.GitTagSource")
    def test_git_failure_exits_one(
        self,
        mock_tags: MagicMock,
        mock_publisher: MagicMock,
        runner: CliRunner,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        mock_tags.return_value = FakeTagSource(
            [], error=subprocess.CalledProcessError(128, ["git"], stderr="fatal")
        )
        mock_publisher.return_value = FakePublisher()

        result = runner.invoke(cli, ["release"], env={"GITHUB_STEP_SUMMARY": None})

        assert result.exit_code == 1
        assert "ERROR: Fatal error in release creation" in result.output


def test_missing_explicit_config_exits_one(
    runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(cli, ["--config", "nope.toml", "release"])

    assert result.exit_code == 1
    assert "Config file not found" in result.output
