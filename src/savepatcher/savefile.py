from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path

from .debug import debug_log
from .formatting import format_hex, seconds_to_timestamp
from .layout import (
    ACTIVE_SLOTS_SECTION,
    HEADER_MAGIC,
    HEADER_MAGIC_SECTION,
    LEVEL_SECTION,
    NAME_SECTION,
    SAVE_FILE_SIZE,
    SAVE_HEADER_CHECKSUM_SECTION,
    SAVE_HEADER_SECTION,
    SECONDS_PLAYED_SECTION,
    SECTIONS,
    STEAM_ID_SECTION,
    profile_section,
)
from .sections import Section

SLOT_IN_USE = 1


class SaveFileError(Exception):
    pass


class SaveFormatError(SaveFileError):
    pass


class SaveIOError(SaveFileError, OSError):
    pass


class ActiveSlotNotFoundError(SaveFileError):
    pass


class AlreadyCorrectError(SaveFileError):
    pass


@dataclass(frozen=True, slots=True)
class SlotSummary:
    index: int
    name: str
    level: int
    time_played: str
    active: bool


def load_file(path: str | Path) -> bytes:
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise SaveIOError(f"Could not open file '{path}': {exc.strerror or exc}") from exc
    debug_log("load", path=path, size=len(data))
    return data


def _atomic_write_bytes(path: Path, data: bytes | bytearray) -> None:
    tmp_path = path.with_name(path.name + f".tmp.{os.getpid()}")
    try:
        tmp_path.write_bytes(data)
        tmp_path.replace(path)
    except OSError as exc:
        try:
            tmp_path.unlink()
        except FileNotFoundError:
            pass
        raise SaveIOError(f"Could not open file '{path}': {exc.strerror or exc}") from exc


def header_digest(data: bytes | bytearray) -> bytes:
    return hashlib.md5(SAVE_HEADER_SECTION.bytes_from(data)).digest()


class SaveFile:
    """An Elden Ring save loaded into memory.

    `original_data` keeps the bytes as loaded. Every mutation lands in
    `patched_data`, which is what `write` persists. Accessors read from
    `patched_data` unless another buffer is passed explicitly.
    """

    def __init__(self, data: bytes | bytearray, *, source: str = "<memory>") -> None:
        self.source = str(source)
        self.validate_data(data, self.source)
        self.original_data = bytes(data)
        self.patched_data = bytearray(self.original_data)
        self.active_slot_index = self.get_active_slot_index(self.original_data)

    @classmethod
    def load(cls, path: str | Path) -> SaveFile:
        return cls(load_file(path), source=str(path))

    @staticmethod
    def validate_data(data: bytes | bytearray, target: str) -> None:
        valid = len(data) == SAVE_FILE_SIZE and HEADER_MAGIC_SECTION.chars_from(data) == HEADER_MAGIC
        debug_log("validate", target=target, size=len(data), valid=valid)
        if not valid:
            raise SaveFormatError(f"{target} is not a valid Elden Ring save file.")

    @staticmethod
    def get_active_slot_index(data: bytes | bytearray) -> int:
        flags = ACTIVE_SLOTS_SECTION.bytes_from(data)
        try:
            return flags.index(SLOT_IN_USE)
        except ValueError:
            raise ActiveSlotNotFoundError("Could not find active slot index") from None

    @property
    def modified(self) -> bool:
        return self.patched_data != self.original_data

    def _buffer(self, data: bytes | bytearray | None) -> bytes | bytearray:
        return self.patched_data if data is None else data

    def _profile(self, section: Section, slot: int | None) -> Section:
        return profile_section(section, self.active_slot_index if slot is None else slot)

    def checksum(self, data: bytes | bytearray | None = None) -> str:
        return format_hex(SAVE_HEADER_CHECKSUM_SECTION.bytes_from(self._buffer(data)))

    def expected_checksum(self, data: bytes | bytearray | None = None) -> str:
        return format_hex(header_digest(self._buffer(data)))

    def checksum_valid(self, data: bytes | bytearray | None = None) -> bool:
        return self.checksum(data) == self.expected_checksum(data)

    def name(self, data: bytes | bytearray | None = None, *, slot: int | None = None) -> str:
        return self._profile(NAME_SECTION, slot).chars_from(self._buffer(data))

    def seconds_played(self, data: bytes | bytearray | None = None, *, slot: int | None = None) -> int:
        return self._profile(SECONDS_PLAYED_SECTION, slot).cast_integer(self._buffer(data), 4)

    def time_played(self, data: bytes | bytearray | None = None, *, slot: int | None = None) -> str:
        return seconds_to_timestamp(self.seconds_played(data, slot=slot))

    def level(self, data: bytes | bytearray | None = None, *, slot: int | None = None) -> int:
        return self._profile(LEVEL_SECTION, slot).cast_integer(self._buffer(data), 4)

    def active_slot(self, data: bytes | bytearray | None = None) -> int:
        return self.active_slot_index

    def steam_id(self, data: bytes | bytearray | None = None) -> int:
        return STEAM_ID_SECTION.cast_integer(self._buffer(data), 8)

    def recalculate_checksum(self) -> str:
        digest = header_digest(self.patched_data)
        digest_hex = format_hex(digest)
        if self.checksum() == digest_hex:
            raise AlreadyCorrectError("Save header checksum is already correct")

        old = self.checksum()
        SAVE_HEADER_CHECKSUM_SECTION.replace(self.patched_data, digest)
        debug_log("checksum", old=old, new=digest_hex)
        return digest_hex

    def replace_steam_id(self, steam_id: int) -> None:
        steam_id = int(steam_id)
        old = self.steam_id()
        if old == steam_id:
            raise AlreadyCorrectError("Steam ID is already correct")

        STEAM_ID_SECTION.replace(self.patched_data, STEAM_ID_SECTION.encode_integer(steam_id))
        debug_log("replace", section="steam_id", old=old, new=steam_id)

    def diff_sections(self) -> list[str]:
        return [
            name
            for name, section in SECTIONS.items()
            if section.bytes_from(self.original_data) != section.bytes_from(self.patched_data)
        ]

    def slot_summaries(self, data: bytes | bytearray | None = None) -> list[SlotSummary]:
        buf = self._buffer(data)
        flags = ACTIVE_SLOTS_SECTION.bytes_from(buf)
        summaries: list[SlotSummary] = []
        for idx, flag in enumerate(flags):
            if flag != SLOT_IN_USE:
                continue
            summaries.append(
                SlotSummary(
                    index=idx,
                    name=self.name(buf, slot=idx),
                    level=self.level(buf, slot=idx),
                    time_played=self.time_played(buf, slot=idx),
                    active=idx == self.active_slot_index,
                )
            )
        return summaries

    def write(self, path: str | Path) -> None:
        path = Path(path)
        self.validate_data(self.patched_data, "Generated data")
        _atomic_write_bytes(path, self.patched_data)
        debug_log("write", path=path, size=len(self.patched_data), sections=",".join(self.diff_sections()) or "none")
