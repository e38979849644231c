"""Interaktiver Setup-Wizard für die Ersteinrichtung des Schuljahres-Syncs.

Fragt Schule und WebUntis-Zugang ab. Nutzt rich für die Konsolenausgabe.
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table
from rich import box

from config.schema import (
    DirectorySystem,
    SchoolEntry,
    SyncConfig,
    SystemType,
    WebUntisConfig,
)

console = Console()


def _header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", expand=False))


def _info(text: str) -> None:
    console.print(f"[dim]{text}[/dim]")


def _success(text: str) -> None:
    console.print(f"[green]✓[/green] {text}")


def show_schools_table(config: SyncConfig) -> None:
    """Zeigt die konfigurierten Schulen als rich-Tabelle an."""
    table = Table(title="Schulen", box=box.ROUNDED)
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Schuljahr")
    table.add_column("WebUntis")
    for s in config.schools:
        systems = ", ".join(
            f"{sy.webuntis_config.url} ({sy.webuntis_config.schoolname})"
            for sy in s.webuntis_systems
        ) or "[yellow]keins[/yellow]"
        table.add_row(s.id, s.name, s.current_year or "–", systems)
    console.print(table)


# ─── SCHRITT 1: Schule ───

def _wizard_school() -> tuple[str, str, Optional[str]]:
    _header("Schritt 1 — Schule")
    _info("ID und Name der Schule in der Schul-Cloud.")
    school_id = Prompt.ask("Schul-ID", default="muster-gymnasium")
    name = Prompt.ask("Name der Schule", default="Muster-Gymnasium")
    year = Prompt.ask("Aktuelles Schuljahr", default="2024/25")
    return school_id, name, year or None


# ─── SCHRITT 2: WebUntis ───

def _wizard_webuntis() -> Optional[DirectorySystem]:
    _header("Schritt 2 — WebUntis")
    if not Confirm.ask("WebUntis-System anbinden?", default=True):
        return None
    url = Prompt.ask("WebUntis-URL", default="https://mese.webuntis.com")
    schoolname = Prompt.ask("Schulname in WebUntis")
    user = Prompt.ask("Benutzer")
    password = Prompt.ask("Passwort", password=True)
    return DirectorySystem(
        type=SystemType.WEBUNTIS,
        webuntis_config=WebUntisConfig(
            url=url, schoolname=schoolname, user=user, password=password,
        ),
    )


# ─── SCHRITT 3: Abgleich ───

def _wizard_sync() -> tuple[int, str]:
    _header("Schritt 3 — Abgleich")
    _info("Termine mit weniger Vorkommen werden als Vertretung verworfen.")
    min_occ = IntPrompt.ask("Mindestanzahl Vorkommen", default=2)
    store = Prompt.ask("Ablage (JSON)", default="output/store.json")
    return min_occ, store


# ─── HAUPT-WIZARD ───

def run_wizard() -> Optional[SyncConfig]:
    """Führt den interaktiven Setup-Wizard aus.

    Returns:
        Fertige SyncConfig oder None, wenn der Nutzer abbricht.
    """
    console.print(Panel(
        "[bold]Willkommen beim Schuljahres-Sync![/bold]\n\n"
        "Klassen und Kurse werden aus WebUntis in die Schul-Cloud übernommen.\n"
        "[dim]Standard-Werte können mit Enter übernommen werden.[/dim]",
        border_style="cyan",
    ))

    try:
        school_id, name, year = _wizard_school()
        system = _wizard_webuntis()
        min_occ, store = _wizard_sync()

        config = SyncConfig(
            schools=[SchoolEntry(
                id=school_id, name=name, current_year=year,
                systems=[system] if system else [],
            )],
            min_occurrences=min_occ,
            store_path=store,
        )
        show_schools_table(config)

        if not Confirm.ask("\nKonfiguration speichern?", default=True):
            console.print("[yellow]Konfiguration wird nicht gespeichert.[/yellow]")
            return None

        _success("Konfiguration wird gespeichert...")
        return config

    except KeyboardInterrupt:
        console.print("\n[yellow]Wizard abgebrochen.[/yellow]")
        return None
