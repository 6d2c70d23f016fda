"""CLI commands for Pedidos API."""

from typing import Optional

import click
import uvicorn

from pedidos_api.settings import get_settings


@click.group()
def cli():
    """Pedidos API CLI."""
    pass


@cli.command()
@click.option("--host", default=None, help="Bind address (defaults to API_HOST).")
@click.option("--port", default=None, type=int, help="Listening port (defaults to PORT).")
@click.option("--reload", is_flag=True, help="Reload on code changes.")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    settings = get_settings()
    uvicorn.run(
        "pedidos_api.main:app",
        host=host or settings.api_host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command("check-config")
def check_config():
    """Print the effective configuration (secrets hidden)."""
    settings = get_settings()
    click.echo(f"environment:      {settings.environment}")
    click.echo(f"listen:           {settings.api_host}:{settings.port}")
    click.echo(f"upload dir:       {settings.upload_dir}")
    click.echo(f"max upload bytes: {settings.max_upload_bytes}")
    click.echo(f"smtp relay:       {settings.smtp_host}:{settings.smtp_port} (tls={settings.smtp_use_tls})")
    if not settings.notifications_enabled:
        click.echo("✗ Notifications disabled.")
    elif settings.smtp_configured:
        click.echo(f"✓ SMTP credentials set for {settings.gmail_user}.")
    else:
        click.echo("✗ GMAIL_USER/GMAIL_PASS missing: approval emails will not be sent.", err=True)


if __name__ == "__main__":
    cli()
