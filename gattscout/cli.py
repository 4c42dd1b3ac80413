"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from gattscout.core.errors import GattscoutError
from gattscout.core.model import DeviceReport, MatchMode, ScanEvent
from gattscout.core.report import render_device_report, render_scan_event, render_target_summary
from gattscout.core.service import ScoutService
from gattscout.core.settings import load_settings, override_settings

app = typer.Typer(help="Discover BLE peripherals by name and list their GATT services")


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


@app.command("scan")
def scan(
    identifier: str | None = typer.Option(None, "--identifier", "-i", help="Advertised name to match"),
    timeout: float | None = typer.Option(None, "--timeout", "-t", help="Scan duration in seconds"),
    match: MatchMode | None = typer.Option(None, "--match", help="Identifier matching mode"),
    adapter: str | None = typer.Option(None, "--adapter", help="Adapter name, e.g. hci0"),
    config: Path | None = typer.Option(None, "--config", help="YAML settings file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Scan, then connect to every matching device and list its services."""
    _configure_logging(verbose)
    try:
        settings = override_settings(
            load_settings(config),
            identifier=identifier,
            scan_timeout_s=timeout,
            match_mode=match,
            adapter_name=adapter,
        )
        service = ScoutService()

        def _on_event(event: ScanEvent) -> None:
            typer.echo(render_scan_event(event, settings.scan_timeout_s))

        def _on_targets(targets: list) -> None:
            typer.echo("")
            typer.echo(render_target_summary(len(targets), settings.identifier))
            typer.echo("")

        def _on_report(report: DeviceReport) -> None:
            for line in render_device_report(report):
                typer.echo(line)
            typer.echo("")

        service.run(settings, on_event=_on_event, on_targets=_on_targets, on_report=_on_report)
    except GattscoutError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("adapters")
def adapters(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """List local Bluetooth adapters."""
    _configure_logging(verbose)
    try:
        found = ScoutService().list_adapters()
        if not found:
            typer.echo("No Bluetooth adapter found.", err=True)
            raise typer.Exit(code=1)
        for adapter in found:
            typer.echo(adapter.identifier())
    except GattscoutError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
