"""Schuljahres-Sync — Haupt-CLI.

Verwendung:
  python main.py setup                    Ersteinrichtung (Wizard)
  python main.py config init              Default-Konfiguration schreiben
  python main.py config show              Konfiguration anzeigen
  python main.py sync                     Alle Schulen aus WebUntis abgleichen
  python main.py sync --school <id>       Eine Schule abgleichen
  python main.py sync --dry-run           Probelauf ohne Speichern
  python main.py demo                     Abgleich mit generiertem Feed
  python main.py store show               Klassen und Kurse anzeigen
  python main.py export                   Klassen und Kurse als Excel
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config_or_abort(ctx: click.Context):
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager(ctx.obj.get("config_path"))
    if mgr.first_run_check():
        console.print(
            "[red]Keine Konfiguration gefunden.[/red]\n"
            "Führen Sie zunächst [bold]python main.py setup[/bold] aus."
        )
        sys.exit(1)
    try:
        config = mgr.load()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    _setup_logging(ctx.obj.get("log_level") or config.log_level)
    return mgr, config


def _open_store(path: str):
    from data.store import JsonStore
    from sync.errors import PersistenceFailure
    try:
        return JsonStore(Path(path))
    except PersistenceFailure as e:
        console.print(f"[red bold]Ablage nicht lesbar:[/red bold] {e}")
        sys.exit(1)


def _run_sync(config, store, schools, source_factory=None, dry_run: bool = False):
    """Führt den Sync aus; speichert die Ablage, wenn kein Probelauf."""
    from sync.errors import PersistenceFailure
    from sync.syncer import RunStatus, SchoolyearSyncer

    target = store.copy() if dry_run else store
    syncer = SchoolyearSyncer(config, target.classes, target.courses, source_factory)
    reports = asyncio.run(syncer.run_all(schools, dry_run=dry_run))

    for report in reports:
        report.print_rich()

    if not dry_run:
        try:
            store.save()
        except PersistenceFailure as e:
            console.print(f"[red bold]Ablage-Fehler:[/red bold] {e}")
            sys.exit(1)
        console.print(f"[green]✓[/green] Ablage gespeichert: {store.path}")
    return reports, any(r.status == RunStatus.ERROR for r in reports)


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
@click.pass_context
def cmd_setup(ctx: click.Context):
    """Ersteinrichtung: Sync-Konfiguration mit dem Setup-Wizard anlegen."""
    from config.wizard import run_wizard
    from config.manager import ConfigManager

    mgr = ConfigManager(ctx.obj.get("config_path"))
    if not mgr.first_run_check():
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            "Verwenden Sie [bold]python main.py config show[/bold] zur Anzeige."
        )
        if not click.confirm("Trotzdem neu einrichten?", default=False):
            return

    config = run_wizard()
    if config is not None:
        mgr.save(config)
        console.print("[bold green]Einrichtung abgeschlossen![/bold green]")
        console.print("Führen Sie jetzt [bold]python main.py sync[/bold] aus.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen oder anlegen."""


@cmd_config.command("init")
@click.option("--force", is_flag=True, default=False,
              help="Vorhandene Konfiguration überschreiben.")
@click.pass_context
def config_init(ctx: click.Context, force: bool):
    """Schreibt die Default-Konfiguration (Beispielschule)."""
    from config.defaults import default_sync_config
    from config.manager import ConfigManager

    mgr = ConfigManager(ctx.obj.get("config_path"))
    if not mgr.first_run_check() and not force:
        console.print("[yellow]Konfiguration existiert bereits (--force zum Überschreiben).[/yellow]")
        sys.exit(1)
    mgr.save(default_sync_config())


@cmd_config.command("show")
@click.pass_context
def config_show(ctx: click.Context):
    """Zeigt die aktuelle Konfiguration an."""
    from config.wizard import show_schools_table
    mgr, config = _load_config_or_abort(ctx)

    console.print(Panel(
        f"Ablage: [bold]{config.store_path}[/bold]  |  "
        f"Mindestvorkommen: {config.min_occurrences}  |  "
        f"Räume: {config.room_limit or 'alle'}",
        title="Sync-Konfiguration",
        border_style="cyan",
    ))
    show_schools_table(config)


# ─── SYNC ─────────────────────────────────────────────────────────────────────

@click.command("sync")
@click.option("--school", "school_key", default=None,
              help="Nur diese Schule (ID oder Name) abgleichen.")
@click.option("--dry-run", is_flag=True, default=False,
              help="Probelauf: Ablage wird nicht gespeichert.")
@click.option("--store", "store_path", default=None,
              help="Pfad der Ablage (überschreibt die Konfiguration).")
@click.option("--report-json", default=None,
              help="Sync-Berichte zusätzlich als JSON speichern.")
@click.pass_context
def cmd_sync(ctx: click.Context, school_key: Optional[str], dry_run: bool,
             store_path: Optional[str], report_json: Optional[str]):
    """Gleicht Klassen und Kurse mit dem aktuellen WebUntis-Schuljahr ab."""
    mgr, config = _load_config_or_abort(ctx)

    schools = config.schools
    if school_key is not None:
        school = config.get_school(school_key)
        if school is None:
            console.print(f"[red]Schule '{school_key}' nicht konfiguriert.[/red]")
            sys.exit(1)
        schools = [school]
    if not schools:
        console.print("[yellow]Keine Schulen konfiguriert.[/yellow]")
        return

    store = _open_store(store_path or config.store_path)
    reports, failed = _run_sync(config, store, schools, dry_run=dry_run)

    if report_json:
        out = Path(report_json)
        out.parent.mkdir(parents=True, exist_ok=True)
        with open(out, "w", encoding="utf-8") as f:
            f.write("[" + ",\n".join(r.model_dump_json(indent=2) for r in reports) + "]\n")
        console.print(f"[green]✓[/green] Bericht gespeichert: {out}")

    sys.exit(1 if failed else 0)


# ─── DEMO ─────────────────────────────────────────────────────────────────────

@click.command("demo")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--classes", "num_classes", default=4, help="Anzahl Klassen.")
@click.option("--rooms", "num_rooms", default=6, help="Anzahl Räume.")
@click.option("--store", "store_path", default="output/demo_store.json",
              help="Pfad der Demo-Ablage.")
@click.option("--dry-run", is_flag=True, default=False,
              help="Probelauf: Ablage wird nicht gespeichert.")
def cmd_demo(seed: int, num_classes: int, num_rooms: int, store_path: str, dry_run: bool):
    """Abgleich mit einem generierten WebUntis-Feed (ohne Netzwerk)."""
    from config.defaults import default_school, default_sync_config
    from data.fake_feed import FakeTimetableSource

    _setup_logging("WARNING")
    config = default_sync_config()
    store = _open_store(store_path)

    def factory():
        return FakeTimetableSource(seed=seed, num_classes=num_classes, num_rooms=num_rooms)

    console.print(f"[bold]Demo-Feed:[/bold] {num_classes} Klassen, {num_rooms} Räume, Seed {seed}")
    _, failed = _run_sync(config, store, [default_school()], factory, dry_run=dry_run)
    sys.exit(1 if failed else 0)


# ─── STORE ────────────────────────────────────────────────────────────────────

@click.group("store")
def cmd_store():
    """Lokale Klassen und Kurse anzeigen."""


@cmd_store.command("show")
@click.option("--store", "store_path", default="output/store.json",
              help="Pfad der Ablage.")
@click.option("--class", "class_name", default=None, help="Nur diese Klasse.")
def store_show(store_path: str, class_name: Optional[str]):
    """Zeigt Klassen, Kurse und wiederkehrende Termine an."""
    from export.helpers import DAY_SHORT, end_time

    store = _open_store(store_path)
    classes = [c for c in store.data.classes if class_name in (None, c.name)]
    if not classes:
        console.print("[dim]Keine Klassen vorhanden.[/dim]")
        return

    for klass in sorted(classes, key=lambda c: c.name):
        table = Table(title=f"Klasse {klass.name}", box=box.ROUNDED)
        table.add_column("Kurs", style="bold")
        table.add_column("Termine")
        for course in sorted(store.courses_for_class(klass.id), key=lambda c: c.name):
            times = ", ".join(
                f"{DAY_SHORT[t.weekday]} {t.start_time}–{end_time(t)} ({t.room})"
                for t in course.times
            ) or "[dim]keine[/dim]"
            table.add_row(course.name, times)
        console.print(table)


# ─── EXPORT ───────────────────────────────────────────────────────────────────

@click.command("export")
@click.option("--store", "store_path", default="output/store.json",
              help="Pfad der Ablage.")
@click.option("--output", "-o", default="output/klassen_kurse.xlsx",
              help="Ausgabepfad der Excel-Datei.")
def cmd_export(store_path: str, output: str):
    """Exportiert Klassen und Kurstermine als Excel-Datei."""
    from export.excel_export import ExcelExporter

    store = _open_store(store_path)
    out_path = Path(output)
    ExcelExporter(store).export(out_path)
    console.print(f"[green]✓[/green] Excel gespeichert: {out_path}")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--config-path", default=None, type=click.Path(path_type=Path),
              help="Pfad der Konfigurationsdatei.")
@click.option("--log-level", default=None,
              help="Log-Level (überschreibt die Konfiguration).")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], log_level: Optional[str]):
    """Schuljahres-Sync: WebUntis → Klassen und Kurse.

    Starten Sie mit: python main.py setup
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["log_level"] = log_level


def main():
    """Einstiegspunkt."""
    cli(obj={})


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_sync)
cli.add_command(cmd_demo)
cli.add_command(cmd_store)
cli.add_command(cmd_export)


if __name__ == "__main__":
    main()
