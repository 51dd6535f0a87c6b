from __future__ import annotations


def format_hex(data: bytes | bytearray) -> str:
    return bytes(data).hex().upper()


def seconds_to_timestamp(seconds: int) -> str:
    total_s = max(0, int(seconds))
    hours = total_s // 3600
    minutes = (total_s // 60) % 60
    secs = total_s % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_steam_id(steam_id: int) -> str:
    return f"{int(steam_id)} (0x{int(steam_id):016x})"
