"""
Command Line Interface for Taskboard Sync.

There is no push command: a fresh process holds no local edits,
so pushing from here would overwrite the sheet with empty tables.
"""

import asyncio
from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..codec import TABLE_NAMES
from ..config import get_settings
from ..log import configure_logging
from ..store import FileSessionStorage, ReactiveStore
from ..store import queries
from ..sync import SyncOrchestrator, SyncOutcome

app = typer.Typer(help="Taskboard Sync - keep the dashboard and its spreadsheet in step")
console = Console()


def _build_store() -> ReactiveStore:
    settings = get_settings()
    return ReactiveStore(
        storage=FileSessionStorage(settings.session_file),
        default_endpoint_url=settings.endpoint_url,
    )


def _require_connection(store: ReactiveStore) -> None:
    if not store.is_connected:
        console.print("❌ No backend connected. Run 'connect URL' first.")
        raise typer.Exit(code=1)


async def _pull_once(store: ReactiveStore) -> Optional[SyncOutcome]:
    orchestrator = SyncOrchestrator(store)
    try:
        return await orchestrator.pull(manual=True)
    finally:
        await orchestrator.stop()


def _counts_table(store: ReactiveStore) -> Table:
    table = Table(title="Remote Data", show_header=True, header_style="bold magenta")
    table.add_column("Collection", style="cyan")
    table.add_column("Sheet Tab")
    table.add_column("Rows", justify="right", style="green")
    for name, collection in store.collections().items():
        table.add_row(name, TABLE_NAMES[name], str(len(collection)))
    return table


@app.command()
def connect(endpoint_url: str = typer.Argument(..., help="Backend endpoint URL")):
    """Store the backend endpoint in the session file."""
    store = _build_store()
    if not endpoint_url.startswith(("http://", "https://")):
        console.print("❌ Please enter an http(s) endpoint URL")
        raise typer.Exit(code=1)
    store.connect(endpoint_url)
    console.print(f"✅ Connected. Session saved to {store.storage.get_uri()}")


@app.command()
def disconnect():
    """Forget the stored backend endpoint."""
    store = _build_store()
    store.disconnect()
    console.print("✅ Disconnected")


@app.command()
def status(remote: bool = typer.Option(False, help="Also fetch row counts from the backend")):
    """Show session and connection status."""
    store = _build_store()
    session = store.get_status()

    table = Table(title="Taskboard Sync Status", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details")
    table.add_row(
        "Backend",
        "🟢 Connected" if session["connected"] else "🔴 Not connected",
        "",
    )
    table.add_row("User", session["current_user"] or "-", "")
    table.add_row(
        "Credential key",
        "set" if session["has_credential_key"] else "not set",
        "stored in plaintext",
    )
    console.print(table)

    if remote:
        _require_connection(store)
        outcome = asyncio.run(_pull_once(store))
        if outcome is None or outcome.failed:
            console.print(f"❌ Could not reach backend: {outcome.error if outcome else 'busy'}")
            raise typer.Exit(code=1)
        console.print(_counts_table(store))


@app.command()
def pull():
    """Pull once and summarize the remote data."""
    store = _build_store()
    _require_connection(store)

    outcome = asyncio.run(_pull_once(store))
    if outcome is None or outcome.failed:
        console.print(f"❌ Pull failed: {outcome.error if outcome else 'busy'}")
        raise typer.Exit(code=1)

    console.print(_counts_table(store))

    progress = Table(title="Active Work Items", show_header=True, header_style="bold magenta")
    progress.add_column("Title", style="cyan")
    progress.add_column("Due")
    progress.add_column("Category")
    progress.add_column("Complete", justify="right", style="green")
    for item in queries.active_work_items(store):
        progress.add_row(
            item.title,
            item.due_date or "-",
            item.category.value,
            f"{queries.completion_percent(store, item):.0f}%",
        )
    console.print(progress)


@app.command()
def watch(
    initial_pull: bool = typer.Option(True, help="Pull once before starting the loops"),
    log_format: Optional[str] = typer.Option(None, help="console or json"),
):
    """Run the auto-push and auto-pull loops until interrupted."""
    configure_logging(fmt=log_format)
    store = _build_store()
    _require_connection(store)
    rprint(Panel.fit("🔄 Starting Taskboard Sync", style="bold blue"))

    async def run():
        orchestrator = SyncOrchestrator(store)
        await orchestrator.start(initial_pull=initial_pull)
        console.print("✅ Sync loops running (Ctrl+C to stop)")
        try:
            await asyncio.Event().wait()
        finally:
            await orchestrator.stop()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        console.print("\n🛑 Shutting down...")


if __name__ == "__main__":
    app()
