"""Encoders for uncompressed and run-length raster formats: BMP, TGA and Radiance HDR."""

from __future__ import annotations

import math
import os
import struct
from collections.abc import Iterator, Sequence

_BMP_FILE_HEADER = 14
_BMP_INFO_HEADER = 40
_BMP_V4_HEADER = 108
_PINK = (255, 0, 255)

_HDR_HEADER = b"#?RADIANCE\n# Written by opmonred\nFORMAT=32-bit_rle_rgbe\n"


def _check_layout(width: int, height: int, comp: int, data: Sequence, allow_zero: bool) -> None:
    if allow_zero:
        if width < 0 or height < 0:
            raise ValueError(f"image size must not be negative, got {width}x{height}")
    elif width <= 0 or height <= 0:
        raise ValueError(f"image size must be positive, got {width}x{height}")
    if not 1 <= comp <= 4:
        raise ValueError(f"component count must be between 1 and 4, got {comp}")
    needed = width * height * comp
    if len(data) < needed:
        raise ValueError(f"pixel data holds {len(data)} values, {needed} needed")


def _row_order(height: int, bottom_up: bool, flip_vertically: bool) -> Iterator[int]:
    if bottom_up != flip_vertically:
        return iter(range(height - 1, -1, -1))
    return iter(range(height))


def _pixel_bytes(px: bytes, comp: int, write_alpha: bool, expand_mono: bool) -> bytes:
    """Encode one pixel in blue-green-red order, optionally followed by alpha."""
    if comp <= 2:
        color = px[0:1] * 3 if expand_mono else px[0:1]
    elif comp == 4 and not write_alpha:
        alpha = px[3]
        mixed = [
            (bg + int((px[k] - bg) * alpha / 255)) & 0xFF
            for k, bg in enumerate(_PINK)
        ]
        color = bytes((mixed[2], mixed[1], mixed[0]))
    else:
        color = bytes((px[2], px[1], px[0]))
    if write_alpha:
        return color + px[comp - 1:comp]
    return color


def _pixel_rows(
    width: int,
    height: int,
    comp: int,
    data: bytes,
    write_alpha: bool,
    expand_mono: bool,
    pad: int,
    flip_vertically: bool,
) -> bytes:
    out = bytearray()
    row_bytes = width * comp
    for j in _row_order(height, True, flip_vertically):
        row = data[j * row_bytes:(j + 1) * row_bytes]
        for start in range(0, row_bytes, comp):
            out += _pixel_bytes(row[start:start + comp], comp, write_alpha, expand_mono)
        out += bytes(pad)
    return bytes(out)


def encode_bmp(width: int, height: int, comp: int, data, flip_vertically: bool = False) -> bytes:
    """Return a BMP file: 24-bit for 1-3 components, 32-bit with an alpha mask for 4."""
    data = bytes(data)
    _check_layout(width, height, comp, data, allow_zero=True)
    if comp != 4:
        pad = (-width * 3) & 3
        offset = _BMP_FILE_HEADER + _BMP_INFO_HEADER
        header = struct.pack(
            "<2sIHHI" "IiiHHIIiiII",
            b"BM", offset + (width * 3 + pad) * height, 0, 0, offset,
            _BMP_INFO_HEADER, width, height, 1, 24, 0, 0, 0, 0, 0, 0,
        )
        body = _pixel_rows(width, height, comp, data, False, True, pad, flip_vertically)
    else:
        offset = _BMP_FILE_HEADER + _BMP_V4_HEADER
        header = struct.pack(
            "<2sIHHI" "IiiHHIIiiII" "IIII" "I" "9I" "III",
            b"BM", offset + width * height * 4, 0, 0, offset,
            _BMP_V4_HEADER, width, height, 1, 32, 3, 0, 0, 0, 0, 0,
            0xFF0000, 0xFF00, 0xFF, 0xFF000000,
            0,
            *([0] * 9),
            0, 0, 0,
        )
        body = _pixel_rows(width, height, comp, data, True, True, 0, flip_vertically)
    return header + body


def write_bmp(path, width: int, height: int, comp: int, data, flip_vertically: bool = False) -> None:
    """Write a BMP file to ``path``."""
    encoded = encode_bmp(width, height, comp, data, flip_vertically)
    with open(os.fspath(path), "wb") as handle:
        handle.write(encoded)


def _tga_rle_row(row: bytes, width: int, comp: int, has_alpha: bool) -> bytes:
    out = bytearray()

    def pixel(index: int) -> bytes:
        return row[index * comp:(index + 1) * comp]

    i = 0
    while i < width:
        length = 1
        differs = True
        if i < width - 1:
            length = 2
            differs = pixel(i) != pixel(i + 1)
            k = i + 2
            if differs:
                prev = i
                while k < width and length < 128:
                    if pixel(prev) != pixel(k):
                        prev += 1
                        length += 1
                    else:
                        length -= 1
                        break
                    k += 1
            else:
                while k < width and length < 128:
                    if pixel(i) == pixel(k):
                        length += 1
                    else:
                        break
                    k += 1
        if differs:
            out.append((length - 1) & 0xFF)
            for k in range(i, i + length):
                out += _pixel_bytes(pixel(k), comp, has_alpha, False)
        else:
            out.append((length - 129) & 0xFF)
            out += _pixel_bytes(pixel(i), comp, has_alpha, False)
        i += length
    return bytes(out)


def encode_tga(
    width: int, height: int, comp: int, data, rle: bool = True, flip_vertically: bool = False
) -> bytes:
    """Return a TGA file, run-length encoded unless ``rle`` is false."""
    data = bytes(data)
    _check_layout(width, height, comp, data, allow_zero=True)
    has_alpha = comp in (2, 4)
    color_bytes = comp - 1 if has_alpha else comp
    image_type = 3 if color_bytes < 2 else 2
    if rle:
        image_type += 8
    header = struct.pack(
        "<BBBHHBHHHHBB",
        0, 0, image_type, 0, 0, 0, 0, 0, width, height,
        (color_bytes + has_alpha) * 8, has_alpha * 8,
    )
    if not rle:
        return header + _pixel_rows(width, height, comp, data, has_alpha, False, 0, flip_vertically)

    body = bytearray()
    row_bytes = width * comp
    for j in _row_order(height, True, flip_vertically):
        body += _tga_rle_row(data[j * row_bytes:(j + 1) * row_bytes], width, comp, has_alpha)
    return header + bytes(body)


def write_tga(
    path, width: int, height: int, comp: int, data, rle: bool = True, flip_vertically: bool = False
) -> None:
    """Write a TGA file to ``path``."""
    encoded = encode_tga(width, height, comp, data, rle, flip_vertically)
    with open(os.fspath(path), "wb") as handle:
        handle.write(encoded)


def _f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def linear_to_rgbe(red: float, green: float, blue: float) -> tuple[int, int, int, int]:
    """Pack a linear colour into shared-exponent RGBE bytes."""
    linear = (_f32(red), _f32(green), _f32(blue))
    maxcomp = max(linear[0], max(linear[1], linear[2]))
    if maxcomp < 1e-32:
        return (0, 0, 0, 0)
    mantissa, exponent = math.frexp(maxcomp)
    normalize = _f32(_f32(_f32(mantissa) * 256.0) / maxcomp)
    r, g, b = (int(_f32(c * normalize)) & 0xFF for c in linear)
    return (r, g, b, (exponent + 128) & 0xFF)


def _hdr_pixels(scanline: Sequence[float], width: int, ncomp: int) -> list[tuple[int, int, int, int]]:
    pixels = []
    for x in range(width):
        base = x * ncomp
        if ncomp >= 3:
            rgb = scanline[base:base + 3]
        else:
            rgb = (scanline[base],) * 3
        pixels.append(linear_to_rgbe(*rgb))
    return pixels


def _hdr_rle_channel(values: bytes) -> bytes:
    out = bytearray()
    width = len(values)
    x = 0
    while x < width:
        r = x
        while r + 2 < width:
            if values[r] == values[r + 1] == values[r + 2]:
                break
            r += 1
        if r + 2 >= width:
            r = width
        while x < r:
            length = min(r - x, 128)
            out.append(length)
            out += values[x:x + length]
            x += length
        if r + 2 < width:
            while r < width and values[r] == values[x]:
                r += 1
            while x < r:
                length = min(r - x, 127)
                out.append(length + 128)
                out.append(values[x])
                x += length
    return bytes(out)


def _hdr_scanline(scanline: Sequence[float], width: int, ncomp: int) -> bytes:
    pixels = _hdr_pixels(scanline, width, ncomp)
    if width < 8 or width >= 32768:
        return b"".join(bytes(p) for p in pixels)
    out = bytearray((2, 2, (width & 0xFF00) >> 8, width & 0xFF))
    for channel in range(4):
        out += _hdr_rle_channel(bytes(p[channel] for p in pixels))
    return bytes(out)


def encode_hdr(width: int, height: int, comp: int, data, flip_vertically: bool = False) -> bytes:
    """Return a Radiance RGBE file from linear float pixels."""
    if data is None:
        raise ValueError("pixel data is required")
    values = [float(v) for v in data]
    _check_layout(width, height, comp, values, allow_zero=False)
    out = bytearray(_HDR_HEADER)
    out += f"EXPOSURE=          1.0000000000000\n\n-Y {height} +X {width}\n".encode("ascii")
    row_len = comp * width
    for i in range(height):
        row = height - 1 - i if flip_vertically else i
        out += _hdr_scanline(values[row * row_len:(row + 1) * row_len], width, comp)
    return bytes(out)


def write_hdr(path, width: int, height: int, comp: int, data, flip_vertically: bool = False) -> None:
    """Write a Radiance RGBE file to ``path``."""
    encoded = encode_hdr(width, height, comp, data, flip_vertically)
    with open(os.fspath(path), "wb") as handle:
        handle.write(encoded)