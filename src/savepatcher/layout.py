from __future__ import annotations

from .sections import Section

SAVE_FILE_NAME = "ER0000.sl2"
SAVE_FILE_SIZE = 0x1BA03D0
HEADER_MAGIC = "BND"

SLOT_COUNT = 10
PROFILE_SUMMARY_OFFSET = 0x1901D0E
PROFILE_SUMMARY_STRIDE = 0x24C
NAME_CHARS = 16

HEADER_MAGIC_SECTION = Section(0x0, len(HEADER_MAGIC))

# USER_DATA_10: the MD5 of the region is stored in the 16 bytes right before it.
SAVE_HEADER_CHECKSUM_SECTION = Section(0x19003A0, 0x10)
SAVE_HEADER_SECTION = Section(0x19003B0, 0x60000)
STEAM_ID_SECTION = Section(0x19003B4, 8)
ACTIVE_SLOTS_SECTION = Section(0x1901D04, SLOT_COUNT)

# Profile summary of slot 0; other slots follow at PROFILE_SUMMARY_STRIDE.
NAME_SECTION = Section(PROFILE_SUMMARY_OFFSET, (NAME_CHARS + 1) * 2, "utf-16-le")
LEVEL_SECTION = Section(PROFILE_SUMMARY_OFFSET + 0x22, 4)
SECONDS_PLAYED_SECTION = Section(PROFILE_SUMMARY_OFFSET + 0x26, 4)

SECTIONS: dict[str, Section] = {
    "header_magic": HEADER_MAGIC_SECTION,
    "save_header_checksum": SAVE_HEADER_CHECKSUM_SECTION,
    "save_header": SAVE_HEADER_SECTION,
    "steam_id": STEAM_ID_SECTION,
    "active_slots": ACTIVE_SLOTS_SECTION,
    "name": NAME_SECTION,
    "level": LEVEL_SECTION,
    "seconds_played": SECONDS_PLAYED_SECTION,
}

PROFILE_SECTIONS = (NAME_SECTION, LEVEL_SECTION, SECONDS_PLAYED_SECTION)


def profile_section(section: Section, slot: int) -> Section:
    if section not in PROFILE_SECTIONS:
        raise ValueError(f"section at {section.offset:#x} is not part of a profile summary")
    idx = int(slot)
    if not (0 <= idx < SLOT_COUNT):
        raise IndexError(f"slot index out of range: {idx}")
    return section.shifted(idx * PROFILE_SUMMARY_STRIDE)
