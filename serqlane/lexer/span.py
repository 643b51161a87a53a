"""
Byte-offset addressing into Serqlane source text.

Spans are small value objects that describe a half-open byte range in the
UTF-8 encoding of a source file. They are not tied to the text
they were created from; pairing a span with the right source is up to the
caller.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

# Source files are limited to 4GiB so offsets fit into 32 bits.
MAX_SOURCE_LEN = 2**32 - 1

SourceText = Union[str, bytes]


def utf8_width(char: str) -> int:
    """Number of bytes `char` occupies when encoded as UTF-8."""
    code = ord(char)
    if code < 0x80:
        return 1
    if code < 0x800:
        return 2
    if code < 0x10000:
        return 3
    return 4


def _is_boundary(data: bytes, offset: int) -> bool:
    # Continuation bytes look like 0b10xxxxxx.
    return offset >= len(data) or (data[offset] & 0xC0) != 0x80


@dataclass(frozen=True)
class SourcePosition:
    """
    An unsigned byte offset into a piece of source code.

    The offset is meaningless without the text it was taken from.
    """
    offset: int

    def __post_init__(self):
        if self.offset < 0 or self.offset > MAX_SOURCE_LEN:
            raise ValueError(f"source offset out of range: {self.offset}")

    def line_column(self, source: SourceText) -> Tuple[int, int]:
        """
        Convert the offset to 1-based line and column.

        Only used for diagnostics, so this walks the text from the start
        instead of keeping a line table around.
        """
        if isinstance(source, bytes):
            source = source.decode("utf-8", errors="replace")

        line = 1
        column = 1
        pos = 0
        for char in source:
            if pos >= self.offset:
                break
            if char == "\n":
                line += 1
                column = 1
            else:
                column += 1
            pos += utf8_width(char)

        return line, column

    def __str__(self) -> str:
        return str(self.offset)


@dataclass(frozen=True)
class SourceSpan:
    """Half-open byte range [start, end) over a source text."""
    start: SourcePosition
    end: SourcePosition

    def __post_init__(self):
        if self.start.offset > self.end.offset:
            raise ValueError(
                f"span start {self.start.offset} is after its end {self.end.offset}"
            )

    @classmethod
    def new(cls, start: int, end: int) -> "SourceSpan":
        return cls(SourcePosition(start), SourcePosition(end))

    @classmethod
    def empty(cls, at: int) -> "SourceSpan":
        """A zero-width span, used for synthesized tokens."""
        return cls.new(at, at)

    def len(self) -> int:
        return self.end.offset - self.start.offset

    def __len__(self) -> int:
        return self.len()

    def is_empty(self) -> bool:
        return self.start.offset == self.end.offset

    def join(self, other: "SourceSpan") -> "SourceSpan":
        """Smallest span covering both `self` and `other`."""
        return SourceSpan.new(
            min(self.start.offset, other.start.offset),
            max(self.end.offset, other.end.offset),
        )

    def text(self, source: SourceText) -> Optional[str]:
        """
        Extract the spanned text from `source`.

        Returns None if the span runs past the end of the text or does not
        fall on UTF-8 character boundaries.
        """
        data = source.encode("utf-8") if isinstance(source, str) else source
        if self.end.offset > len(data):
            return None
        if not (_is_boundary(data, self.start.offset) and _is_boundary(data, self.end.offset)):
            return None
        try:
            return data[self.start.offset:self.end.offset].decode("utf-8")
        except UnicodeDecodeError:
            return None

    def __str__(self) -> str:
        return f"{self.start.offset}..{self.end.offset}"
