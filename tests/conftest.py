from __future__ import annotations

import hashlib
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest


def pytest_configure(config: pytest.Config) -> None:
    # Ensure the local `src/` tree wins over any other editable install that may exist
    # (e.g. a different git worktree pointing at the same project).
    src_dir = Path(__file__).resolve().parents[1] / "src"
    src_str = str(src_dir)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


SaveBuilder = Callable[..., bytearray]


@pytest.fixture
def make_save() -> SaveBuilder:
    from savepatcher import debug, layout

    debug.set_debug_enabled(None)

    def _build(
        *,
        steam_id: int = 1000,
        active_flags: Sequence[int] = (1, 0, 0, 0, 0, 0, 0, 0, 0, 0),
        names: Sequence[str] = ("Tarnished",),
        levels: Sequence[int] = (42,),
        seconds: Sequence[int] = (3723,),
        fix_checksum: bool = True,
    ) -> bytearray:
        data = bytearray(layout.SAVE_FILE_SIZE)
        data[0:4] = b"BND4"
        layout.ACTIVE_SLOTS_SECTION.replace(data, bytes(active_flags))
        layout.STEAM_ID_SECTION.replace(data, int(steam_id).to_bytes(8, "little"))
        for slot, name in enumerate(names):
            section = layout.profile_section(layout.NAME_SECTION, slot)
            section.replace(data, name.encode("utf-16-le").ljust(section.size, b"\x00"))
        for slot, level in enumerate(levels):
            layout.profile_section(layout.LEVEL_SECTION, slot).replace(data, int(level).to_bytes(4, "little"))
        for slot, value in enumerate(seconds):
            layout.profile_section(layout.SECONDS_PLAYED_SECTION, slot).replace(data, int(value).to_bytes(4, "little"))
        if fix_checksum:
            digest = hashlib.md5(layout.SAVE_HEADER_SECTION.bytes_from(data)).digest()
            layout.SAVE_HEADER_CHECKSUM_SECTION.replace(data, digest)
        return data

    return _build


@pytest.fixture
def save_bytes(make_save: SaveBuilder) -> bytearray:
    return make_save()
