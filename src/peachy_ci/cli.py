"""CLI entry point for Peachy CI.

Each command loads settings from the environment, performs one GitHub
operation (or one CI flow) and prints the JSON result.

A transport failure is fatal: the failing URL and the error are printed and
the process exits with status 1. Invalid configuration exits with status 2.
"""

import json
import logging
from typing import Any, Callable

import typer
from pydantic import ValidationError
from rich import print as rprint

from peachy_ci.config import PeachySettings, get_settings
from peachy_ci.deploy import DeployWorkflow
from peachy_ci.github.client import GitHubClient, TransportError

logger = logging.getLogger(__name__)

app = typer.Typer(help="GitHub merge and stage deployment helper for CI jobs.")


def _redact_secret(value: str, visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters."""
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def _configure_logging(settings: PeachySettings) -> None:
    logging.basicConfig(
        level=settings.log_level_value,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.debug(f"GitHub Repository: {settings.github_repository}")
    logger.debug(f"GitHub Token: {_redact_secret(settings.github_token)}")


def _load_settings() -> PeachySettings:
    try:
        return get_settings()
    except ValidationError as e:
        rprint("[red]Invalid configuration:[/red]")
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            rprint(f"  {field}: {error['msg']}")
        raise typer.Exit(code=2)


def build_client() -> GitHubClient:
    """Build a GitHub client from environment settings."""
    settings = _load_settings()
    _configure_logging(settings)
    return GitHubClient(settings.github_token, settings.github_repository)


def _run(operation: Callable[[], Any]) -> Any:
    """Run a GitHub operation, exiting the process on transport failure."""
    try:
        return operation()
    except TransportError as e:
        typer.echo(f"URL: {e.url}")
        typer.echo(f'Error: "{e.message}" - Code: {e.code}')
        raise typer.Exit(code=1)


def _print_json(value: Any) -> None:
    typer.echo(json.dumps(value, indent=2, sort_keys=True))


@app.command()
def issues(filters: str = typer.Argument("", help="Encoded query string, e.g. state=open")):
    """List repository issues."""
    client = build_client()
    _print_json(_run(lambda: client.get_issues(filters)))


@app.command("pull-request")
def pull_request(pr_id: int = typer.Argument(..., help="Pull request number")):
    """Show a pull request."""
    client = build_client()
    _print_json(_run(lambda: client.get_pull_request(pr_id)))


@app.command()
def merge(
    pr_id: int = typer.Argument(..., help="Pull request number"),
    delete_branch: bool = typer.Option(
        False, "--delete-branch", help="Delete the head branch after merging"
    ),
    force: bool = typer.Option(
        False, "--force", help="Merge without checking mergeable state"
    ),
):
    """Merge a pull request once it is mergeable and clean."""
    client = build_client()
    outcome = _run(
        lambda: DeployWorkflow(client).merge_if_ready(pr_id, delete_branch, force=force)
    )
    if not outcome.merged:
        rprint(f"[yellow]Pull request #{pr_id} not merged:[/yellow] {outcome.reason}")
        raise typer.Exit(code=3)
    if delete_branch and not outcome.branch_deleted:
        rprint(f"[yellow]Head branch of pull request #{pr_id} was not deleted[/yellow]")
    _print_json(outcome.response)


@app.command("delete-branch")
def delete_branch_command(branch: str = typer.Argument(..., help="Branch name")):
    """Delete a branch."""
    client = build_client()
    _print_json(_run(lambda: client.delete_branch(branch)))


@app.command()
def deployments():
    """List stage deployments."""
    client = build_client()
    _print_json(_run(client.get_deployments))


@app.command("latest-deployment")
def latest_deployment():
    """Show the most recent stage deployment."""
    client = build_client()
    deployment = _run(DeployWorkflow(client).latest_deployment)
    _print_json(deployment.model_dump(mode="json") if deployment else None)


@app.command()
def deploy(
    branch: str = typer.Argument(..., help="Ref to deploy"),
    description: str = typer.Argument(..., help="Deployment description"),
    report_status: bool = typer.Option(
        True, "--report-status/--no-report-status",
        help="Post pending and success statuses after creating the deployment",
    ),
):
    """Create a stage deployment for a branch."""
    client = build_client()
    if not report_status:
        _print_json(_run(lambda: client.create_deploy(branch, description)))
        return

    deployment = _run(lambda: DeployWorkflow(client).deploy_branch(branch, description))
    if deployment is None:
        rprint(f"[red]Deployment of {branch} failed[/red]")
        raise typer.Exit(code=3)
    _print_json(deployment)


@app.command("deploy-status")
def deploy_status(
    deploy_id: int = typer.Argument(..., help="Deployment id"),
    state: str = typer.Argument(..., help="Status, e.g. pending or success"),
    description: str = typer.Argument(..., help="Status description"),
):
    """Post a status for a deployment."""
    client = build_client()
    _print_json(_run(lambda: client.deploy_status(deploy_id, state, description)))


if __name__ == "__main__":
    app()
