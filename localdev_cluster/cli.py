"""Main CLI entry point for the local development cluster."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from localdev_cluster.exceptions import ConfigurationError, LocaldevError
from localdev_cluster.logging_config import LOG_LEVELS, get_logger, parse_level, setup_logging

app = typer.Typer(
    name="localdev",
    help="Provision and health-check the local kind development cluster",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


def _settings(ctx: typer.Context):
    from pydantic import ValidationError

    from localdev_cluster.config import ProvisionerSettings

    config_file = (ctx.obj or {}).get("config_file")
    if config_file:
        return ProvisionerSettings.load(config_file)
    try:
        return ProvisionerSettings()
    except ValidationError as e:
        raise ConfigurationError("Invalid LOCALDEV_* environment settings", str(e))


def _provisioner(ctx: typer.Context):
    from localdev_cluster.provisioner import ClusterProvisioner

    try:
        return ClusterProvisioner.from_settings(_settings(ctx), report=console.print)
    except ConfigurationError as e:
        console.print(f"[red]Configuration Error:[/red] {e.message}")
        if e.details:
            console.print(f"\n{e.details}")
        raise typer.Exit(code=1)


def _print_error(title: str, error: LocaldevError) -> None:
    console.print(f"[red]{title}:[/red] {error.message}")
    if error.details:
        console.print(f"\n{error.details}")


# Global callback to set up logging
@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: str | None = typer.Option(None, "--log-file", help="Path to log file"),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        envvar="LOCALDEV_LOG_LEVEL",
        help=f"Lowest level logged to stderr ({', '.join(LOG_LEVELS)})",
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="YAML settings file (LOCALDEV_* variables fill the rest)"
    ),
):
    """Global options for all commands."""
    try:
        parse_level(log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level")
    log_path = Path(log_file) if log_file else None
    setup_logging(level=log_level, verbose=verbose, log_file=log_path)
    ctx.obj = {"config_file": config_file}
    logger.debug("Logging initialized")


@app.command()
def version() -> None:
    """Show version information."""
    from localdev_cluster import __version__

    typer.echo(f"localdev version {__version__}")


@app.command()
def ensure(ctx: typer.Context) -> None:
    """
    Make sure a healthy local cluster is running.

    A healthy cluster is reused as is. Otherwise its containers are removed,
    a new 4-node kind cluster is created, the ingress controller is applied
    and the command waits for every node to become ready.
    """
    provisioner = _provisioner(ctx)

    try:
        result = provisioner.ensure_cluster()
    except KeyboardInterrupt:
        console.print("\n[yellow]Provisioning interrupted by user[/yellow]")
        raise typer.Exit(code=130)

    if result.success:
        if not result.recreated:
            console.print("[green]✓[/green] Cluster is healthy, nothing to do")
        else:
            console.print(
                f"[green]✓[/green] Cluster ready, kubeconfig at {provisioner.kubeconfig_location()}"
            )
        return

    _print_error(f"Provisioning failed ({result.phase.value})", result.error)
    console.print("\nRun the command again to retry from the start")
    raise typer.Exit(code=1)


@app.command()
def status(ctx: typer.Context) -> None:
    """
    Show whether the local cluster is healthy.

    Exits with 0 when the cluster can be reused and 1 otherwise.
    """
    from localdev_cluster.models.cluster import HealthState

    provisioner = _provisioner(ctx)
    verdict = provisioner.inspector.inspect()

    table = Table(title=f"Cluster {provisioner.identity.name}")
    table.add_column("State", style="cyan")
    table.add_column("Reason", style="magenta")
    table.add_column("Kubeconfig", style="yellow")

    if verdict.is_healthy:
        state = "[green]✓ Healthy[/green]"
    elif verdict.state == HealthState.ABSENT:
        state = "[yellow]Absent[/yellow]"
    else:
        state = "[red]✗ Degraded[/red]"
    table.add_row(state, verdict.reason or "", str(provisioner.kubeconfig_location()))
    console.print(table)

    if not verdict.is_healthy:
        raise typer.Exit(code=1)


@app.command()
def reap(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """
    Force-remove every container of the local cluster.
    """
    provisioner = _provisioner(ctx)

    if not force:
        console.print(
            f"[yellow]Warning:[/yellow] About to remove all containers of cluster "
            f"'{provisioner.identity.name}'"
        )
        if not typer.confirm("Are you sure you want to continue?"):
            console.print("Operation cancelled")
            raise typer.Exit(code=0)

    try:
        removed = provisioner.reaper.reap()
    except LocaldevError as e:
        _print_error("Docker Error", e)
        raise typer.Exit(code=1)

    console.print(f"[green]✓[/green] Removed {removed} containers")


@app.command()
def wait(
    ctx: typer.Context,
    timeout: float = typer.Option(
        90.0, "--timeout", "-t", min=0, help="Seconds to wait for all nodes to become ready"
    ),
) -> None:
    """
    Wait until every node of the local cluster is ready.
    """
    provisioner = _provisioner(ctx)

    try:
        provisioner.wait_for_nodes(timeout=timeout)
    except LocaldevError as e:
        _print_error("Nodes not ready", e)
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Wait interrupted by user[/yellow]")
        raise typer.Exit(code=130)

    console.print("[green]✓ All nodes are ready[/green]")


@app.command()
def kubeconfig(ctx: typer.Context) -> None:
    """Print the path of the local cluster's kubeconfig."""
    typer.echo(str(_provisioner(ctx).kubeconfig_location()))


@app.command()
def manifest() -> None:
    """Print the ingress controller manifest applied to new clusters."""
    from localdev_cluster.manifests import TRAEFIK_INGRESS_YAML

    typer.echo(TRAEFIK_INGRESS_YAML.strip())


if __name__ == "__main__":
    app()
