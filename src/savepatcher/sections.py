from __future__ import annotations

from dataclasses import dataclass, replace as dc_replace

from construct import Int8ul, Int16ul, Int32ul, Int64ul
from construct.core import ConstructError

_INTEGER_FORMATS = {
    1: Int8ul,
    2: Int16ul,
    4: Int32ul,
    8: Int64ul,
}


class SectionError(ValueError):
    pass


class SectionBoundsError(SectionError):
    pass


class SectionWidthError(SectionError):
    pass


class SectionValueError(SectionError):
    pass


@dataclass(frozen=True, slots=True)
class Section:
    """A fixed `offset`/`size` window into a save buffer.

    Descriptors never hold data; every read and write takes the buffer as an
    argument, so the same descriptor addresses the original and the patched
    copy alike.
    """

    offset: int
    size: int
    encoding: str = "ascii"

    @property
    def end(self) -> int:
        return self.offset + self.size

    def shifted(self, delta: int) -> Section:
        return dc_replace(self, offset=self.offset + int(delta))

    def _check_bounds(self, data: bytes | bytearray | memoryview) -> None:
        if self.offset < 0 or self.end > len(data):
            raise SectionBoundsError(
                f"section [{self.offset:#x}, {self.end:#x}) is out of bounds for a buffer of {len(data):#x} bytes"
            )

    def bytes_from(self, data: bytes | bytearray | memoryview) -> bytes:
        self._check_bounds(data)
        return bytes(data[self.offset : self.end])

    def chars_from(self, data: bytes | bytearray | memoryview) -> str:
        # Text fields are NUL-padded character arrays.
        text = self.bytes_from(data).decode(self.encoding, errors="replace")
        return text.split("\x00", 1)[0]

    def cast_integer(self, data: bytes | bytearray | memoryview, width: int) -> int:
        fmt = _INTEGER_FORMATS.get(int(width))
        if fmt is None or width != self.size:
            raise SectionWidthError(f"cannot read a {width}-byte integer from a {self.size}-byte section")
        return int(fmt.parse(self.bytes_from(data)))

    def encode_integer(self, value: int) -> bytes:
        fmt = _INTEGER_FORMATS.get(self.size)
        if fmt is None:
            raise SectionWidthError(f"no integer encoding for a {self.size}-byte section")
        try:
            return fmt.build(int(value))
        except ConstructError as exc:
            raise SectionValueError(f"{value} does not fit in {self.size} bytes: {exc}") from exc

    def replace(self, data: bytearray, new_bytes: bytes | bytearray) -> None:
        if len(new_bytes) != self.size:
            raise SectionWidthError(f"expected {self.size} bytes, got {len(new_bytes)}")
        self._check_bounds(data)
        data[self.offset : self.end] = new_bytes
