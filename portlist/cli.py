"""Typer CLI entrypoint."""

from __future__ import annotations

import logging

import typer

from portlist.core.errors import OptionConflictError, PortlistError
from portlist.core.model import PortFamily, ReportOptions
from portlist.core.report import render_report
from portlist.core.service import PortListService

app = typer.Typer(help="List COM (serial) and LPT (parallel) ports, optionally filtered by bus and vendor")

COPYRIGHT_NOTICE = """\
portlist comes with ABSOLUTELY NO WARRANTY.

This program is free software; you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation; either version 2 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License along
with this program; if not, write to the Free Software Foundation, Inc.,
51 Franklin Street, Fifth Floor, Boston, MA 02110-1301 USA."""


def _configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _build_service() -> PortListService:
    service = PortListService()
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


def _port_family(exclude_com: bool, exclude_lpt: bool) -> PortFamily:
    if exclude_com and exclude_lpt:
        raise OptionConflictError("--exclude-com and --exclude-lpt cannot be combined")
    if exclude_com:
        return PortFamily.LPT_ONLY
    if exclude_lpt:
        return PortFamily.COM_ONLY
    return PortFamily.ALL


@app.command("list")
def list_ports(
    filters: list[str] | None = typer.Argument(
        None,
        help="Bus filters: usb, pci, bt, optionally =VID or =VID:PID in hex (e.g. usb=0403, pci=8086:9d3d)",
    ),
    all_ports: bool = typer.Option(False, "--all", "-a", help="Also list remembered (not present) ports"),
    long_form: bool = typer.Option(False, "--long", "-l", help="Include bus, VID, PID, revision and vendor"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Multi-line details per port (implies --long)"),
    exclude_available: bool = typer.Option(
        False, "--exclude-available", "-x", help="List only remembered ports (implies --all)"
    ),
    exclude_com: bool = typer.Option(False, "--exclude-com", help="Exclude COM ports"),
    exclude_lpt: bool = typer.Option(False, "--exclude-lpt", help="Exclude LPT/PRN ports"),
    vid: list[str] | None = typer.Option(None, "--vid", help="Hex USB vendor id to match (repeatable)"),
    pid: list[str] | None = typer.Option(None, "--pid", help="Hex USB VID:PID pair to match (repeatable)"),
    preset: list[str] | None = typer.Option(None, "--preset", "-p", help="Apply a named filter preset (repeatable)"),
    debug: bool = typer.Option(False, "--debug", help="Log per-device decisions to stderr"),
) -> None:
    """List available ports, sorted by name.

    \b
    Examples:
      portlist list                      list available ports and description
      portlist list -l                   longer, detailed list of available ports
      portlist list -a                   all available and remembered ports
      portlist list --exclude-lpt        exclude printer ports, COM ports only
      portlist list --pid 2341:0001      match Arduino Uno VID/PID
      portlist list --pid 04d8:000a      match Microchip USB serial port reference
      portlist list --pid 1d50:6098      match Aperture Labs RFIDler
      portlist list --vid 0403           match FTDI USB serial bridge chips
      portlist list --vid 4e8 --vid 421  match either Samsung or Nokia
      portlist list pci=13fe bt          PCI cards with vendor 13FE and Bluetooth ports
    """
    _configure_logging(debug)
    try:
        options = ReportOptions(
            include_absent=all_ports,
            long_form=long_form,
            verbose=verbose,
            exclude_available=exclude_available,
            port_family=_port_family(exclude_com, exclude_lpt),
        )
        service = _build_service()
        spec = service.build_filter(filters or (), vids=vid or (), pairs=pid or (), preset_ids=preset or ())
        result = service.list_ports(spec, options)
        for warning in result.warnings:
            typer.echo(f"Warning: {warning}", err=True)
        for line in render_report(result, options):
            typer.echo(line)
    except PortlistError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("presets")
def list_presets() -> None:
    """List available filter presets and their filters."""
    try:
        service = _build_service()
        presets = service.list_presets()
        if not presets:
            typer.echo("No presets loaded")
            raise typer.Exit(code=1)

        for item in presets:
            typer.echo(f"{item.id}: {item.name}")
            typer.echo(f"  match: {', '.join(item.tokens)}")
    except PortlistError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("copyright")
def show_copyright() -> None:
    """Show copyright and warranty details."""
    typer.echo(COPYRIGHT_NOTICE)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
