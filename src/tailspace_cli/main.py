"""CLI main entry point."""

import shutil
import subprocess
import sys
from pathlib import Path

import click

from .config import ProvisionConfig, load_config
from .errors import TailspaceError
from .formatters import (
    print_banner,
    print_check_result,
    print_config,
    print_run_summary,
    print_section_header,
    print_verification_summary,
)
from .provision import DevcontainerProvisioner, catalog_names
from .shared.logging import configure_logging
from .verify import VerificationSuite

IMAGE_NAME = "tailspace/devcontainer:local"
DEVCONTAINER_CLI_PACKAGE = "@devcontainers/cli"

HELP_TEXT = """Tailspace Dev Container

Targets:
  test               Run verification tests
  install-local      Run the setup script
  install-cli        Install @devcontainers/cli
  build              Build devcontainer image
  clean              Clean up images
  config             Show provisioning configuration
"""


@click.group(invoke_without_command=True)
@click.option("-c", "--config", "config_path", type=click.Path(), help="Config file path")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="info",
    help="Log level",
)
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, log_level: str, json_logs: bool) -> None:
    """Tailspace dev container tooling."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    configure_logging(log_level, json_output=json_logs)

    if ctx.invoked_subcommand is None:
        click.echo(HELP_TEXT)


def _load_config(ctx: click.Context) -> ProvisionConfig:
    try:
        return load_config(ctx.obj.get("config_path"))
    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command("help")
def help_command() -> None:
    """Show available targets."""
    click.echo(HELP_TEXT)


@cli.command("test")
@click.pass_context
def test_command(ctx: click.Context) -> None:
    """Run repository verification checks."""
    config = _load_config(ctx)
    root = Path.cwd()
    try:
        suite = VerificationSuite.from_yaml()
    except ValueError as e:
        click.echo(f"Error: invalid verification suite: {e}", err=True)
        sys.exit(1)

    print_banner("Tailspace Dev Container - Verification")

    def on_section(section) -> None:
        if section is not suite.sections[0]:
            click.echo("")
        print_section_header(section)

    report = suite.run(
        root,
        catalog_names(config),
        on_result=print_check_result,
        on_section=on_section,
    )
    print_verification_summary(report)
    sys.exit(0 if report.ok else 1)


@cli.command("install-local")
@click.pass_context
def install_local(ctx: click.Context) -> None:
    """Provision this container: tools, configs, Docker, Kind cluster."""
    config = _load_config(ctx)
    try:
        report = DevcontainerProvisioner(config).run()
    except TailspaceError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    print_run_summary(report)


@cli.command("install-cli")
def install_cli() -> None:
    """Install the devcontainer CLI with npm."""
    code = _install_devcontainer_cli()
    if code != 0:
        sys.exit(code)


def _install_devcontainer_cli() -> int:
    if shutil.which("npm") is None:
        click.echo("npm not found. Please install Node.js")
        return 1
    click.echo(f"npm install -g {DEVCONTAINER_CLI_PACKAGE}")
    return subprocess.run(["npm", "install", "-g", DEVCONTAINER_CLI_PACKAGE]).returncode


@cli.command()
def build() -> None:
    """Build the devcontainer image."""
    code = _install_devcontainer_cli()
    if code != 0:
        sys.exit(code)
    try:
        result = subprocess.run(
            [
                "devcontainer",
                "build",
                "--workspace-folder",
                ".",
                "--image-name",
                IMAGE_NAME,
            ]
        )
    except FileNotFoundError:
        click.echo("devcontainer CLI not found after install", err=True)
        sys.exit(1)
    if result.returncode != 0:
        sys.exit(result.returncode)


@cli.command()
def clean() -> None:
    """Remove the locally built image."""
    try:
        subprocess.run(["docker", "rmi", "-f", IMAGE_NAME], capture_output=True)
    except FileNotFoundError:
        pass  # Nothing to clean without docker


@cli.command("config")
@click.pass_context
def config_command(ctx: click.Context) -> None:
    """Show resolved provisioning configuration."""
    config = _load_config(ctx)
    values = config.as_dict()
    print_config(values, {key: config.get_source(key) for key in values})


def main() -> None:
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
