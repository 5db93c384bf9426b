"""Main CLI application for RPS Duel."""

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from rpsduel import __version__
from rpsduel.core.moves import EffectivenessTier, MoveType, get_effectiveness
from rpsduel.utils.config import config
from rpsduel.utils.log import configure_logging

# Create main app
app = typer.Typer(
    name="rpsduel",
    help="RPS Duel - realtime rock/paper/scissors battle server",
    no_args_is_help=True,
)

console = Console()

TIER_STYLES = {
    EffectivenessTier.SUPER: "green",
    EffectivenessTier.NORMAL: "white",
    EffectivenessTier.NOT: "red",
}


@app.command("serve")
def serve(
    host: str = typer.Option(config.host, "--host", help="Interface to bind"),
    port: int = typer.Option(config.port, "--port", "-p", help="Port to listen on"),
    log_level: str = typer.Option(config.log_level, "--log-level", "-l", help="Logging level"),
) -> None:
    """Run the game server."""
    import uvicorn

    configure_logging(log_level, console=console)
    console.print(
        Panel(
            f"Listening on [bold]{host}:{port}[/bold]\n"
            f"WebSocket endpoint: [cyan]/ws[/cyan]",
            title=f"RPS Duel v{__version__}",
            box=box.ROUNDED,
        )
    )
    uvicorn.run(
        "rpsduel.server:app",
        host=host,
        port=port,
        log_level=log_level.lower(),
        log_config=None,
    )


@app.command("matchups")
def show_matchups() -> None:
    """Show the effectiveness of every attack against every defense."""
    table = Table(title="Attack vs Defense", box=box.ROUNDED)
    table.add_column("Attack \\ Defense", style="bold")
    for defense in MoveType:
        table.add_column(defense.value.capitalize(), justify="center")

    for attack in MoveType:
        cells = []
        for defense in MoveType:
            multiplier, tier = get_effectiveness(attack, defense)
            style = TIER_STYLES[tier]
            cells.append(f"[{style}]x{multiplier:g} ({tier.value})[/{style}]")
        table.add_row(attack.value.capitalize(), *cells)

    console.print(table)


@app.command("version")
def show_version() -> None:
    """Show version information."""
    console.print(f"RPS Duel v{__version__}")


if __name__ == "__main__":
    app()
