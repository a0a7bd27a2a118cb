from pathlib import Path
import logging
import typer
from rich import print as rprint
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from typing import List, Optional

from .config import load_settings, load_snapshot
from .errors import CompositionError, CyclicTopologyError
from .generator import generate_snapshot_from_template, save_snapshot_yaml
from .session import EditingSession
from .sync import FileRegistry
from .validator import validate_snapshot_file
from .visualize import ascii_plan_from_file

app = typer.Typer(no_args_is_help=True, help="Wire composer CLI: validate and save wire graphs")

@app.callback()
def main(ctx: typer.Context,
         log_level: Optional[str] = typer.Option(None, help="Logging level (overrides the settings file)."),
         settings: Path = typer.Option(Path("wires.yaml"), help="Settings YAML file.")):
    ctx.obj = load_settings(settings)
    level = log_level or ctx.obj.log_level
    logging.basicConfig(level=level.upper(), format="%(message)s", handlers=[RichHandler()], force=True)

@app.command()
def generate(template: str = typer.Option(..., help="Template to use: timer-logger | asset-store"),
             name: str = typer.Option("snapshot", help="Output filename (without .yaml)"),
             outdir: Path = typer.Option(Path("snapshots"), help="Where to place the YAML"),
    ):
    """Write an example registry snapshot."""
    snapshot = generate_snapshot_from_template(template)
    outdir.mkdir(exist_ok=True, parents=True)
    outfile = outdir / f"{name}.yaml"
    save_snapshot_yaml(snapshot, outfile)
    rprint(Panel.fit(f"Saved template [bold]{template}[/] to [cyan]{outfile}[/]"))

@app.command()
def validate(file: Path):
    """Validate the wire graph of a snapshot (names, endpoints, ports, cycles)."""
    ok, messages = validate_snapshot_file(file)
    table = Table(title="Validation Report", show_lines=True)
    table.add_column("Status", justify="center", style="bold")
    table.add_column("Message")
    for m in messages:
        status = "OK" if m.startswith("OK:") else "ERR"
        table.add_row(status, m)
    rprint(table)
    if not ok:
        raise typer.Exit(code=1)

@app.command()
def explain(file: Path):
    """Print an ASCII plan of the wire graph."""
    print(ascii_plan_from_file(file))

def _component_id(session: EditingSession, name: str) -> str:
    component = session.graph.find_by_name(name)
    if component is None:
        raise typer.BadParameter(f"No component named '{name}'.")
    return component.id

@app.command()
def save(ctx: typer.Context,
         file: Path,
         out: Path = typer.Option(Path("transaction.yaml"), help="Where the transaction is written."),
         connect: List[str] = typer.Option([], help="Add a wire, as PRODUCER:CONSUMER component names."),
         remove: List[str] = typer.Option([], help="Remove a component by name before saving.")):
    """Reconcile a snapshot, apply edits and save the transaction."""
    session = EditingSession.from_snapshot(load_snapshot(file), ctx.obj)
    try:
        for pair in connect:
            producer, _, consumer = pair.partition(":")
            session.connect(_component_id(session, producer), _component_id(session, consumer))
        for name in remove:
            session.remove_component(_component_id(session, name))
        transaction = session.save(FileRegistry(out))
    except CyclicTopologyError as e:
        rprint(f"[bold red]Save aborted:[/] {e}")
        raise typer.Exit(code=1)
    except CompositionError as e:
        rprint(f"[bold red]Error:[/] {e}")
        raise typer.Exit(code=1)
    rprint(Panel.fit(
        f"Saved [bold]{len(transaction.topology.components)}[/] component(s), "
        f"[bold]{len(transaction.topology.wires)}[/] wire(s), "
        f"[bold]{len(transaction.deletions)}[/] deletion(s) to [cyan]{out}[/]"))

if __name__ == "__main__":
    app()
