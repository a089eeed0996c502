#!/usr/bin/env python3
"""
Hello Versioning CLI.

Run the reference hello service or call it through HelloClient.

Usage:
    python cli.py --help
    python cli.py --service server --verbose
    python cli.py --service greet --name world
    python cli.py --service greet --name world --two
    python cli.py --service config
"""

import asyncio
import subprocess
import sys
from pathlib import Path

import click
import structlog

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from hello_versioning.core.config import validate_project_root  # noqa: E402
from hello_versioning.core.exceptions import ApplicationError  # noqa: E402
from hello_versioning.core.logging import get_logger, setup_logging  # noqa: E402


@click.command()
@click.option(
    "--service", "-s",
    type=click.Choice(["server", "greet", "config", "info"]),
    default="info",
    help="Service or command to run.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (INFO level logging).",
)
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Enable debug output (DEBUG level logging).",
)
@click.option("--host", default=None, help="Server host.")
@click.option("--port", default=None, type=int, help="Server port.")
@click.option("--reload", is_flag=True, help="Enable auto-reload (server only).")
@click.option("--name", default="world", help="Who to greet (greet only).")
@click.option(
    "--two",
    is_flag=True,
    help="Use say_hello_two (API version 2, deferred) instead of say_hello.",
)
@click.option(
    "--base-url",
    default=None,
    help="Hello service URL (greet only). Defaults to client.yaml.",
)
def main(
    service: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    name: str,
    two: bool,
    base_url: str | None,
) -> None:
    """
    Hello Versioning CLI.

    \b
    Examples:
        python cli.py --service server --verbose
        python cli.py --service greet --name world
        python cli.py --service greet --name world --two
        python cli.py --service config
        python cli.py --service info
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")

    structlog.contextvars.bind_contextvars(source="cli")

    logger = get_logger(__name__)

    logger.debug("CLI invoked", service=service, log_level=log_level)

    if service == "server":
        run_server(logger, host, port, reload)
    elif service == "greet":
        greet(logger, name, two, base_url)
    elif service == "config":
        show_config(logger)
    elif service == "info":
        show_info(logger)


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Start the reference hello service."""
    from hello_versioning.core.config import get_app_config

    try:
        server_config = get_app_config().application.server
    except Exception as e:
        logger.error("Failed to load configuration.", error=str(e))
        click.echo(
            click.style("Error: Could not load config/settings/application.yaml.", fg="red"),
            err=True,
        )
        sys.exit(1)

    server_host = host or server_config.host
    server_port = port or server_config.port

    logger.info("Starting server", host=server_host, port=server_port, reload=reload)

    cmd = [
        sys.executable, "-m", "uvicorn",
        "hello_versioning.backend.main:app",
        "--host", server_host,
        "--port", str(server_port),
    ]

    if reload:
        cmd.append("--reload")

    click.echo(f"Starting server at http://{server_host}:{server_port}")
    click.echo("Press Ctrl+C to stop\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server failed to start", exit_code=e.returncode)
        sys.exit(e.returncode)


def greet(logger, name: str, two: bool, base_url: str | None) -> None:
    """Call the hello service once and print the reply."""
    from hello_versioning.client.hello import HelloClient

    async def _greet_two(client: HelloClient) -> str:
        async with client:
            return await client.say_hello_two(name)

    try:
        client = HelloClient(base_url=base_url)
        if two:
            reply = asyncio.run(_greet_two(client))
        else:
            with client:
                reply = client.say_hello(name)
    except (ApplicationError, RuntimeError) as e:
        logger.error("Greeting failed", error=str(e))
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo(reply)


def show_config(logger) -> None:
    """Display loaded configuration."""
    click.echo("Application Configuration:\n")

    try:
        from hello_versioning.core.config import get_app_config, get_client_settings

        app_config = get_app_config()
        sections = {
            "Application Settings": app_config.application.model_dump(),
            "Client Settings (with overrides)": get_client_settings().model_dump(),
            "Server Settings": app_config.server.model_dump(),
            "Logging Settings": app_config.logging.model_dump(),
        }

        for title, values in sections.items():
            click.echo(f"{title}:")
            click.echo("-" * 40)
            _echo_mapping(values, indent=2)
            click.echo()

        logger.info("Configuration displayed successfully")

    except Exception as e:
        logger.error("Failed to load configuration", error=str(e))
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)


def _echo_mapping(values: dict, indent: int) -> None:
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"{' ' * indent}{key}:")
            _echo_mapping(value, indent + 2)
        else:
            click.echo(f"{' ' * indent}{key}: {value}")


def show_info(logger) -> None:
    """Display application information."""
    click.echo("Hello Versioning")
    click.echo("=" * 40)

    try:
        from hello_versioning.core.config import get_app_config
        app_config = get_app_config()
        click.echo(f"Name: {app_config.application.name}")
        click.echo(f"Version: {app_config.application.version}")
        click.echo(f"Description: {app_config.application.description}")
    except Exception as e:
        logger.error("Failed to load application configuration", error=str(e))
        click.echo(
            click.style("Error: Could not load application.yaml configuration.", fg="red"),
            err=True,
        )
        sys.exit(1)

    click.echo()
    click.echo("Services (--service):")
    click.echo("  server         Reference hello service (uvicorn)")
    click.echo("  greet          Call the hello service")
    click.echo("  config         Display configuration")
    click.echo("  info           Show this information")
    click.echo()
    click.echo("Options:")
    click.echo("  --name         Who to greet")
    click.echo("  --two          Use API version 2 (deferred call)")
    click.echo("  --verbose, -v  Enable INFO level logging")
    click.echo("  --debug, -d    Enable DEBUG level logging")


if __name__ == "__main__":
    main()
