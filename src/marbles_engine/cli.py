"""Typer CLI for Marbles-Engine."""

import asyncio

import typer
from rich.console import Console

app = typer.Typer(name="marbles", help="Marbles-Engine: supply-chain-finance approval workflow")
console = Console()


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(8080, help="Bind port"),
):
    """Start the Marbles-Engine API server."""
    import uvicorn
    from marbles_engine.app import create_app

    console.print(f"[bold green]Starting Marbles-Engine on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


async def _invoke(function: str, args: list[str]):
    from marbles_engine.common.config import get_settings
    from marbles_engine.common.logging import setup_logging
    from marbles_engine.deps import get_db, get_invocation_service

    setup_logging(get_settings().log_level)
    db = get_db()
    await db.init()
    await db.create_all()
    try:
        return await get_invocation_service().execute(db, function, args)
    finally:
        await db.close()


@app.command()
def invoke(
    function: str = typer.Argument(..., help="Chaincode function name (e.g. init_owner)"),
    args: list[str] = typer.Argument(None, help="String arguments for the function"),
):
    """Run one invocation directly against the configured ledger database."""
    response = asyncio.run(_invoke(function, args or []))
    if response.ok:
        console.print(f"[bold green]OK[/bold green] tx {response.tx_id}")
        if response.payload:
            console.print(response.payload.decode(errors="replace"), markup=False)
    else:
        console.print(f"[bold red]{response.code}[/bold red] — {response.message}")
        raise typer.Exit(1)


@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check Marbles-Engine server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(f"[bold green]{data['status']}[/bold green] — v{data['version']}")
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
