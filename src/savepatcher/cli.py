from __future__ import annotations

import shutil
from pathlib import Path

import typer

from . import __version__
from .debug import set_debug_enabled
from .formatting import format_steam_id
from .layout import SECTIONS
from .savefile import AlreadyCorrectError, SaveFile, SaveFileError

app = typer.Typer(add_completion=False, no_args_is_help=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="log save file events to stderr"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="print the version and exit",
    ),
) -> None:
    """Inspect and patch Elden Ring save files."""
    if debug:
        set_debug_enabled(True)


def _fail(message: str) -> typer.Exit:
    typer.echo(f"error: {message}", err=True)
    return typer.Exit(code=1)


def _load(path: Path) -> SaveFile:
    try:
        return SaveFile.load(path)
    except SaveFileError as exc:
        raise _fail(str(exc)) from exc


def _describe(save: SaveFile) -> list[str]:
    return [
        f"Name: {save.name()}",
        f"Level: {save.level()}",
        f"Time played: {save.time_played()}",
        f"Active slot: {save.active_slot()}",
        f"Steam ID: {format_steam_id(save.steam_id())}",
    ]


@app.command("info")
def cmd_info(path: Path = typer.Argument(..., exists=True, dir_okay=False, help="save file")) -> None:
    """Print the active character and checksum state of a save file."""
    save = _load(path)
    for line in _describe(save):
        typer.echo(line)
    typer.echo(f"Checksum: {save.checksum()}")
    typer.echo(f"Expected checksum: {save.expected_checksum()}")
    typer.echo(f"Checksum valid: {'yes' if save.checksum_valid() else 'no'}")


@app.command("slots")
def cmd_slots(path: Path = typer.Argument(..., exists=True, dir_okay=False, help="save file")) -> None:
    """List every occupied character slot."""
    save = _load(path)
    for summary in save.slot_summaries():
        marker = "*" if summary.active else " "
        typer.echo(
            f"{marker} slot={summary.index}  name={summary.name!r}  "
            f"level={summary.level}  time={summary.time_played}"
        )


@app.command("sections")
def cmd_sections() -> None:
    """Print the section catalogue of the save format."""
    for name, section in SECTIONS.items():
        typer.echo(f"{name:22s} offset=0x{section.offset:08x}  size=0x{section.size:x}  encoding={section.encoding}")


@app.command("patch")
def cmd_patch(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="save file to patch"),
    steam_id: int | None = typer.Option(None, "--steam-id", min=0, max=2**64 - 1, help="replace the embedded Steam ID"),
    checksum: bool = typer.Option(False, "--checksum", help="recalculate the save header checksum"),
    output: Path | None = typer.Option(None, "--output", "-o", dir_okay=False, help="output path (default: patch in place)"),
    backup: bool = typer.Option(False, "--backup", help="copy the input to <path>.bak before writing"),
) -> None:
    """Patch the Steam ID and/or the header checksum of a save file."""
    if steam_id is None and not checksum:
        raise typer.BadParameter("nothing to do: pass --steam-id and/or --checksum")

    save = _load(path)
    for line in _describe(save):
        typer.echo(line)

    try:
        if steam_id is not None:
            old_steam_id = save.steam_id()
            save.replace_steam_id(steam_id)
            typer.echo(f"Steam ID: {format_steam_id(old_steam_id)} -> {format_steam_id(save.steam_id())}")
            # The Steam ID lives inside the checksummed header.
            checksum = True
        if checksum:
            old_checksum = save.checksum()
            new_checksum = save.recalculate_checksum()
            typer.echo(f"Checksum: {old_checksum} -> {new_checksum}")
    except AlreadyCorrectError as exc:
        raise _fail(str(exc)) from exc

    dest = output if output is not None else path
    try:
        if backup:
            backup_path = path.with_name(path.name + ".bak")
            shutil.copyfile(path, backup_path)
            typer.echo(f"Backup: {backup_path}")
        save.write(dest)
    except (OSError, SaveFileError) as exc:
        raise _fail(str(exc)) from exc
    typer.echo(f"Wrote {dest}")


if __name__ == "__main__":
    app()
