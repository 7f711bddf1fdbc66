"""CLI entry point for monorelease."""

from __future__ import annotations

import sys
import traceback
from pathlib import Path

import click

from monorelease.changeset import generate_changeset
from monorelease.config import MonoreleaseConfig, load_config
from monorelease.github import StepSummary
from monorelease.releases import publish_releases
from monorelease.shell import fatal
from monorelease.sources import GhReleasePublisher, GitTagSource, TurboAffectedPackages


def _crash(context: str, exc: Exception) -> None:
    """Report an unexpected exception with its traceback and exit 1."""
    traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
    fatal(f"{context}: {exc}")


@click.group()
@click.version_option(package_name="monorelease")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file. (default: ./monorelease.toml if present)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """Changeset and GitHub release glue for a pnpm/turbo monorepo."""
    ctx.obj = load_config(config_path)


@cli.command()
@click.argument("description", required=False)
@click.option(
    "--pr-number",
    envvar="PR_NUMBER",
    default=None,
    help="Pull request number to reference. [env: PR_NUMBER]",
)
@click.option(
    "--repository",
    envvar="GITHUB_REPOSITORY",
    default=None,
    help="owner/repo, used to link the pull request. [env: GITHUB_REPOSITORY]",
)
@click.pass_obj
def changeset(
    config: MonoreleaseConfig,
    description: str | None,
    pr_number: str | None,
    repository: str | None,
) -> None:
    """Write a changeset bumping every package affected by this change."""
    try:
        generate_changeset(
            config.changeset,
            TurboAffectedPackages(config.changeset.affected_command),
            summary=description,
            pr_number=pr_number,
            repository=repository,
        )
    except Exception as exc:
        _crash("Error generating changeset", exc)


@cli.command()
@click.option(
    "--summary-file",
    envvar="GITHUB_STEP_SUMMARY",
    default=None,
    help="Markdown file to append the report to. [env: GITHUB_STEP_SUMMARY]",
)
@click.option(
    "--repository",
    envvar="GITHUB_REPOSITORY",
    default=None,
    help="owner/repo, used to link created releases. [env: GITHUB_REPOSITORY]",
)
@click.pass_obj
def release(
    config: MonoreleaseConfig, summary_file: str | None, repository: str | None
) -> None:
    """Create GitHub releases for the application tags at HEAD."""
    try:
        report = publish_releases(
            config.release,
            GitTagSource(),
            GhReleasePublisher(generate_notes=config.release.generate_notes),
            summary=StepSummary(summary_file),
            repository=repository,
        )
    except Exception as exc:
        _crash("Fatal error in release creation", exc)

    stats = report.statistics
    if stats is None:
        return
    if report.exit_code:
        print(f"\n❌ {stats.failed} release(s) failed", file=sys.stderr)
        sys.exit(report.exit_code)
    print(f"\n✅ Successfully created {stats.created} release(s)")
