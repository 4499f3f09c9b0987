"""PNG encoder with a small built-in zlib/DEFLATE compressor."""

from __future__ import annotations

import bisect
import os
import struct
import zlib

_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
_COLOR_TYPES = {1: 0, 2: 4, 3: 2, 4: 6}

_HASH_SIZE = 16384
_WINDOW = 32768
_MAX_MATCH = 258
_STORED_BLOCK = 32767

_LENGTH_BASE = (3, 4, 5, 6, 7, 8, 9, 10, 11, 13, 15, 17, 19, 23, 27, 31, 35, 43, 51, 59,
                67, 83, 99, 115, 131, 163, 195, 227, 258, 259)
_LENGTH_EXTRA = (0, 0, 0, 0, 0, 0, 0, 0, 1, 1, 1, 1, 2, 2, 2, 2, 3, 3, 3, 3, 4, 4, 4, 4,
                 5, 5, 5, 5, 0)
_DIST_BASE = (1, 2, 3, 4, 5, 7, 9, 13, 17, 25, 33, 49, 65, 97, 129, 193, 257, 385, 513, 769,
              1025, 1537, 2049, 3073, 4097, 6145, 8193, 12289, 16385, 24577, 32768)
_DIST_EXTRA = (0, 0, 0, 0, 1, 1, 2, 2, 3, 3, 4, 4, 5, 5, 6, 6, 7, 7, 8, 8, 9, 9, 10, 10,
               11, 11, 12, 12, 13, 13)

_MASK32 = 0xFFFFFFFF


class _BitWriter:
    """Collects bits least-significant first into a byte array."""

    def __init__(self, out: bytearray) -> None:
        self.out = out
        self.buffer = 0
        self.count = 0

    def add(self, code: int, bits: int) -> None:
        self.buffer |= code << self.count
        self.count += bits
        while self.count >= 8:
            self.out.append(self.buffer & 0xFF)
            self.buffer >>= 8
            self.count -= 8

    def add_reversed(self, code: int, bits: int) -> None:
        self.add(_bit_reverse(code, bits), bits)

    def huffman(self, symbol: int) -> None:
        """Emit a symbol with the fixed DEFLATE Huffman code."""
        if symbol <= 143:
            self.add_reversed(0x30 + symbol, 8)
        elif symbol <= 255:
            self.add_reversed(0x190 + symbol - 144, 9)
        elif symbol <= 279:
            self.add_reversed(symbol - 256, 7)
        else:
            self.add_reversed(0xC0 + symbol - 280, 8)

    def pad_to_byte(self) -> None:
        while self.count:
            self.add(0, 1)


def _bit_reverse(code: int, bits: int) -> int:
    result = 0
    for _ in range(bits):
        result = (result << 1) | (code & 1)
        code >>= 1
    return result


def _zhash(data: bytes, pos: int) -> int:
    h = data[pos] + (data[pos + 1] << 8) + (data[pos + 2] << 16)
    h ^= (h << 3) & _MASK32
    h = (h + (h >> 5)) & _MASK32
    h ^= (h << 4) & _MASK32
    h = (h + (h >> 17)) & _MASK32
    h ^= (h << 25) & _MASK32
    h = (h + (h >> 6)) & _MASK32
    return h


def _match_length(data: bytes, earlier: int, current: int, limit: int) -> int:
    limit = min(limit, _MAX_MATCH)
    length = 0
    while length < limit and data[earlier + length] == data[current + length]:
        length += 1
    return length


def zlib_compress(data, quality: int = 8) -> bytes:
    """Compress ``data`` into a zlib stream using fixed Huffman codes.

    ``quality`` bounds the length of each hash chain; values below 5 act as 5.
    Falls back to stored blocks when compression would expand the data.
    """
    data = bytes(data)
    size = len(data)
    quality = max(quality, 5)

    out = bytearray((0x78, 0x5E))
    bits = _BitWriter(out)
    bits.add(1, 1)  # final block
    bits.add(1, 2)  # fixed Huffman

    chains: dict[int, list[int]] = {}
    mask = _HASH_SIZE - 1
    i = 0
    while i < size - 3:
        chain = chains.setdefault(_zhash(data, i) & mask, [])
        best = 3
        best_pos = None
        for pos in chain:
            if pos > i - _WINDOW:
                length = _match_length(data, pos, i, size - i)
                if length >= best:
                    best, best_pos = length, pos
        if len(chain) == 2 * quality:
            del chain[:quality]
        chain.append(i)

        if best_pos is not None:
            # Lazy matching: prefer a literal if the next position matches longer.
            for pos in chains.get(_zhash(data, i + 1) & mask, ()):
                if pos > i - (_WINDOW - 1) and _match_length(data, pos, i + 1, size - i - 1) > best:
                    best_pos = None
                    break

        if best_pos is not None:
            distance = i - best_pos
            j = bisect.bisect_right(_LENGTH_BASE, best) - 1
            bits.huffman(j + 257)
            if _LENGTH_EXTRA[j]:
                bits.add(best - _LENGTH_BASE[j], _LENGTH_EXTRA[j])
            j = bisect.bisect_right(_DIST_BASE, distance) - 1
            bits.add_reversed(j, 5)
            if _DIST_EXTRA[j]:
                bits.add(distance - _DIST_BASE[j], _DIST_EXTRA[j])
            i += best
        else:
            bits.huffman(data[i])
            i += 1

    for byte in data[i:]:
        bits.huffman(byte)
    bits.huffman(256)
    bits.pad_to_byte()

    if len(out) > size + 2 + ((size + _STORED_BLOCK - 1) // _STORED_BLOCK) * 5:
        del out[2:]
        for start in range(0, size, _STORED_BLOCK):
            block = data[start:start + _STORED_BLOCK]
            length = len(block)
            out.append(1 if start + length == size else 0)
            out += struct.pack("<HH", length, ~length & 0xFFFF)
            out += block

    out += struct.pack(">I", zlib.adler32(data) & _MASK32)
    return bytes(out)


def crc32(data) -> int:
    """Return the CRC-32 used by PNG chunks."""
    return zlib.crc32(bytes(data)) & _MASK32


def paeth(a: int, b: int, c: int) -> int:
    """Return the Paeth predictor of left ``a``, above ``b`` and upper-left ``c``."""
    p = a + b - c
    pa, pb, pc = abs(p - a), abs(p - b), abs(p - c)
    if pa <= pb and pa <= pc:
        return a & 0xFF
    if pb <= pc:
        return b & 0xFF
    return c & 0xFF


def _filter_line(line: bytes, prior: bytes, comp: int, filter_type: int) -> bytes:
    if filter_type == 0:
        return bytes(line)
    out = bytearray(len(line))
    for i, value in enumerate(line):
        left = line[i - comp] if i >= comp else 0
        up = prior[i]
        if filter_type == 1:
            predicted = left
        elif filter_type == 2:
            predicted = up
        elif filter_type == 3:
            predicted = (left + up) >> 1
        else:
            upper_left = prior[i - comp] if i >= comp else 0
            predicted = paeth(left, up, upper_left)
        out[i] = (value - predicted) & 0xFF
    return bytes(out)


def _line_cost(filtered: bytes) -> int:
    return sum(v if v < 128 else 256 - v for v in filtered)


def _chunk(tag: bytes, payload: bytes) -> bytes:
    return struct.pack(">I", len(payload)) + tag + payload + struct.pack(">I", crc32(tag + payload))


def encode_png(
    pixels,
    width: int,
    height: int,
    comp: int,
    stride: int = 0,
    compression_level: int = 8,
    force_filter: int = -1,
    flip_vertically: bool = False,
) -> bytes:
    """Return a PNG file holding ``comp`` 8-bit channels per pixel.

    ``stride`` is the byte distance between rows (0 means tightly packed).
    ``force_filter`` in 0..4 fixes the row filter; otherwise each row's
    filter is chosen by the smallest sum of absolute filtered values.
    """
    if comp not in _COLOR_TYPES:
        raise ValueError(f"component count must be between 1 and 4, got {comp}")
    if width < 0 or height < 0:
        raise ValueError(f"image size must not be negative, got {width}x{height}")
    pixels = bytes(pixels)
    row_bytes = width * comp
    if stride == 0:
        stride = row_bytes
    if stride < row_bytes:
        raise ValueError(f"stride {stride} is shorter than a row of {row_bytes} bytes")
    needed = (height - 1) * stride + row_bytes if height else 0
    if len(pixels) < needed:
        raise ValueError(f"pixel data holds {len(pixels)} bytes, {needed} needed")
    if force_filter >= 5:
        force_filter = -1

    def row(index: int) -> bytes:
        source = height - 1 - index if flip_vertically else index
        return pixels[source * stride:source * stride + row_bytes]

    filtered = bytearray()
    prior = bytes(row_bytes)
    for y in range(height):
        line = row(y)
        if force_filter > -1:
            chosen = force_filter
            encoded = _filter_line(line, prior, comp, chosen)
        else:
            candidates = [_filter_line(line, prior, comp, t) for t in range(5)]
            chosen = min(range(5), key=lambda t: _line_cost(candidates[t]))
            encoded = candidates[chosen]
        filtered.append(chosen)
        filtered += encoded
        prior = line

    compressed = zlib_compress(filtered, compression_level)
    header = struct.pack(">IIBBBBB", width, height, 8, _COLOR_TYPES[comp], 0, 0, 0)
    return (
        _PNG_SIGNATURE
        + _chunk(b"IHDR", header)
        + _chunk(b"IDAT", compressed)
        + _chunk(b"IEND", b"")
    )


def write_png(
    path,
    pixels,
    width: int,
    height: int,
    comp: int,
    stride: int = 0,
    compression_level: int = 8,
    force_filter: int = -1,
    flip_vertically: bool = False,
) -> None:
    """Write a PNG file to ``path``."""
    encoded = encode_png(
        pixels, width, height, comp, stride, compression_level, force_filter, flip_vertically
    )
    with open(os.fspath(path), "wb") as handle:
        handle.write(encoded)