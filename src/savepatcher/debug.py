from __future__ import annotations

import datetime as dt
import os

import typer

DEBUG_ENV = "SAVEPATCHER_DEBUG"

_DEBUG_OVERRIDE: bool | None = None


def set_debug_enabled(enabled: bool | None) -> None:
    global _DEBUG_OVERRIDE
    _DEBUG_OVERRIDE = None if enabled is None else bool(enabled)


def debug_enabled() -> bool:
    if _DEBUG_OVERRIDE is not None:
        return bool(_DEBUG_OVERRIDE)
    return os.environ.get(DEBUG_ENV) == "1"


def _format_value(value: object) -> str:
    text = str(value)
    return text.replace("\n", "\\n")


def format_event(event: str, **fields: object) -> str:
    timestamp = dt.datetime.now(dt.timezone.utc).isoformat(timespec="milliseconds")
    line = f"{timestamp} event={str(event).strip()}"
    payload = " ".join(f"{key}={_format_value(fields[key])}" for key in sorted(fields))
    if payload:
        line += f" {payload}"
    return line


def debug_log(event: str, **fields: object) -> None:
    if not debug_enabled():
        return
    typer.echo(format_event(event, **fields), err=True)
