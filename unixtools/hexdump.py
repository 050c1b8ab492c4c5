from io import BytesIO
import logging
import struct
from typing import BinaryIO, Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

BYTES_PER_LINE = 16

# C escapes used by the one-byte character display
CHAR_ESCAPES = {
    0x00: "\\0",
    0x07: "\\a",
    0x08: "\\b",
    0x09: "\\t",
    0x0A: "\\n",
    0x0B: "\\v",
    0x0C: "\\f",
    0x0D: "\\r",
}


def is_printable(byte: int) -> bool:
    return 0x20 <= byte <= 0x7E


@dataclass(frozen=True)
class DisplayRecord:
    offset: int
    data: bytes

    @property
    def hex_columns(self) -> str:
        slots = [f"{b:02x}" for b in self.data]
        slots += ["  "] * (BYTES_PER_LINE - len(slots))
        half = BYTES_PER_LINE // 2
        return " ".join(slots[:half]) + "  " + " ".join(slots[half:])

    @property
    def ascii_column(self) -> str:
        return "".join(chr(b) if is_printable(b) else "." for b in self.data)


class HexFormatter:
    """
    Lazily cut a byte stream into DisplayRecords of up to 16 bytes.

    The only state is the read position. Once the stream is exhausted the
    formatter stays exhausted; build a new one to format the data again.
    """

    def __init__(self, stream: BinaryIO, skip: int = 0, length: int | None = None):
        self.stream = stream
        self.position = 0
        self.remaining = length
        self._exhausted = False

        if skip:
            self._skip(skip)

    def __iter__(self) -> "HexFormatter":
        return self

    def __next__(self) -> DisplayRecord:
        if self._exhausted:
            raise StopIteration

        want = BYTES_PER_LINE
        if self.remaining is not None:
            want = min(want, self.remaining)

        data = self._read_window(want)
        if not data:
            self._exhausted = True
            raise StopIteration

        record = DisplayRecord(offset=self.position, data=data)
        self.position += len(data)
        if self.remaining is not None:
            self.remaining -= len(data)

        # A short window means the stream ended
        if len(data) < want:
            self._exhausted = True

        return record

    def _skip(self, count: int) -> None:
        if self.stream.seekable():
            self.stream.seek(count, 1)
            self.position = count
            return

        while self.position < count:
            chunk = self.stream.read(min(4096, count - self.position))
            if not chunk:
                break
            self.position += len(chunk)

    def _read_window(self, n: int) -> bytes:
        window = bytearray()
        # Pipes may return fewer bytes than asked for before EOF
        while len(window) < n:
            chunk = self.stream.read(n - len(window))
            if not chunk:
                break
            window.extend(chunk)
        return bytes(window)


def format_source(
    source: BinaryIO | bytes, skip: int = 0, length: int | None = None
) -> HexFormatter:
    if isinstance(source, (bytes, bytearray)):
        source = BytesIO(source)
    logger.debug("formatting source (skip=%d, length=%s)", skip, length)
    return HexFormatter(source, skip=skip, length=length)


def render_canonical(record: DisplayRecord) -> str:
    return f"{record.offset:08x}  {record.hex_columns}  |{record.ascii_column}|"


def render_one_byte_octal(record: DisplayRecord) -> str:
    return f"{record.offset:07x}" + "".join(f" {b:03o}" for b in record.data)


def render_one_byte_char(record: DisplayRecord) -> str:
    chars = []
    for b in record.data:
        if is_printable(b):
            char = chr(b)
        elif b in CHAR_ESCAPES:
            char = CHAR_ESCAPES[b]
        else:
            char = f"{b:03o}"
        chars.append(f"{char:>4}")
    return f"{record.offset:07x}" + "".join(chars)


def _words(data: bytes) -> tuple[int, ...]:
    # Odd trailing byte gets a zero high byte
    if len(data) % 2:
        data += b"\x00"
    return struct.unpack(f"<{len(data) // 2}H", data)


def render_two_bytes_hex(record: DisplayRecord) -> str:
    return f"{record.offset:07x}" + "".join(f"    {w:04x}" for w in _words(record.data))


def render_two_bytes_decimal(record: DisplayRecord) -> str:
    return f"{record.offset:07x}" + "".join(f"   {w:05d}" for w in _words(record.data))


def render_two_bytes_octal(record: DisplayRecord) -> str:
    return f"{record.offset:07x}" + "".join(f"  {w:06o}" for w in _words(record.data))


RENDERERS: dict[str, Callable[[DisplayRecord], str]] = {
    "canonical": render_canonical,
    "one_byte_octal": render_one_byte_octal,
    "one_byte_char": render_one_byte_char,
    "two_bytes_hex": render_two_bytes_hex,
    "two_bytes_decimal": render_two_bytes_decimal,
    "two_bytes_octal": render_two_bytes_octal,
}
