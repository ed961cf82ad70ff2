"""
CLI: ``addressiq serve``: start the API server.
"""

from __future__ import annotations

import typer
import uvicorn

from addressiq.cli.utils import console
from addressiq.core.settings import Settings


def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address (default: HOST setting)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (default: PORT setting)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
    workers: int = typer.Option(1, "--workers", "-w", help="Number of workers"),
) -> None:
    """Start the AddressIQ REST API server."""
    settings = Settings()
    bind_host = host or settings.host
    bind_port = port or settings.port

    console.print(f"[bold green]Starting AddressIQ API[/bold green] on {bind_host}:{bind_port}")
    uvicorn.run(
        "addressiq.api:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        reload=reload,
        workers=workers,
        log_level="warning" if settings.log_level == "warn" else settings.log_level,
    )
