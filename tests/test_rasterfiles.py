import math
import struct

import pytest

from opmonred.rasterfiles import (
    encode_bmp,
    encode_hdr,
    encode_tga,
    linear_to_rgbe,
    write_bmp,
    write_hdr,
    write_tga,
)


def _image(width, height, comp, seed=7):
    return bytes((seed * 31 + i * 17) % 256 for i in range(width * height * comp))


def _decode_bmp(buf):
    offset = struct.unpack_from("<I", buf, 10)[0]
    width, height = struct.unpack_from("<ii", buf, 18)
    bpp = struct.unpack_from("<H", buf, 28)[0] // 8
    stride = (width * bpp + 3) & ~3
    rows = []
    for j in range(height):
        start = offset + j * stride
        rows.append(buf[start:start + width * bpp])
    rows.reverse()
    return width, height, bpp, rows


def _decode_tga(buf):
    image_type = buf[2]
    width, height = struct.unpack_from("<HH", buf, 12)
    bpp = buf[16] // 8
    body = buf[18:]
    total = width * height * bpp
    if image_type >= 8:
        out = bytearray()
        p = 0
        while len(out) < total:
            c = body[p]
            p += 1
            if c & 0x80:
                n = (c & 0x7F) + 1
                out += body[p:p + bpp] * n
                p += bpp
            else:
                n = c + 1
                out += body[p:p + n * bpp]
                p += n * bpp
        assert p == len(body)
        pixels = bytes(out)
    else:
        assert len(body) == total
        pixels = body
    rows = [pixels[j * width * bpp:(j + 1) * width * bpp] for j in range(height)]
    rows.reverse()
    return width, height, bpp, b"".join(rows)


def _tga_to_input_order(pixels, comp):
    out = bytearray()
    for i in range(0, len(pixels), comp):
        px = pixels[i:i + comp]
        if comp >= 3:
            out += bytes((px[2], px[1], px[0])) + px[3:]
        else:
            out += px
    return bytes(out)


def _decode_hdr(buf):
    marker = buf.index(b"+X ")
    end = buf.index(b"\n", marker) + 1
    height = int(buf[buf.index(b"-Y ") + 3:marker].strip())
    width = int(buf[marker + 3:end - 1])
    p = end
    rows = []
    for _ in range(height):
        if 8 <= width < 32768:
            assert buf[p:p + 2] == b"\x02\x02"
            assert (buf[p + 2] << 8) | buf[p + 3] == width
            p += 4
            channels = []
            for _c in range(4):
                vals = bytearray()
                while len(vals) < width:
                    c = buf[p]
                    p += 1
                    if c > 128:
                        vals += bytes([buf[p]]) * (c - 128)
                        p += 1
                    else:
                        vals += buf[p:p + c]
                        p += c
                assert len(vals) == width
                channels.append(vals)
            rows.append([tuple(ch[x] for ch in channels) for x in range(width)])
        else:
            rows.append([tuple(buf[p + 4 * x:p + 4 * x + 4]) for x in range(width)])
            p += 4 * width
    assert p == len(buf)
    return rows


def test_bmp_rgb_header_and_pixels():
    data = _image(3, 2, 3)
    out = encode_bmp(3, 2, 3, data)
    assert out[:2] == b"BM"
    assert struct.unpack_from("<I", out, 2)[0] == len(out)
    assert struct.unpack_from("<I", out, 14)[0] == 40
    width, height, bpp, rows = _decode_bmp(out)
    assert (width, height, bpp) == (3, 2, 3)
    for j, row in enumerate(rows):
        src = data[j * 9:(j + 1) * 9]
        expected = b"".join(bytes((src[i + 2], src[i + 1], src[i])) for i in range(0, 9, 3))
        assert row == expected


def test_bmp_mono_expands_to_grey():
    data = bytes([5, 200, 77, 0])
    _, _, bpp, rows = _decode_bmp(encode_bmp(2, 2, 1, data))
    assert bpp == 3
    assert b"".join(rows) == b"".join(bytes([v]) * 3 for v in data)


def test_bmp_rgba_uses_v4_header():
    data = _image(2, 2, 4)
    out = encode_bmp(2, 2, 4, data)
    assert struct.unpack_from("<I", out, 14)[0] == 108
    assert struct.unpack_from("<IIII", out, 54) == (0xFF0000, 0xFF00, 0xFF, 0xFF000000)
    assert struct.unpack_from("<I", out, 2)[0] == len(out)
    _, _, bpp, rows = _decode_bmp(out)
    assert bpp == 4
    flat = b"".join(rows)
    for i in range(0, len(data), 4):
        assert flat[i:i + 4] == bytes((data[i + 2], data[i + 1], data[i], data[i + 3]))


def test_bmp_flip_reverses_rows():
    data = _image(3, 4, 3)
    _, _, _, plain = _decode_bmp(encode_bmp(3, 4, 3, data))
    _, _, _, flipped = _decode_bmp(encode_bmp(3, 4, 3, data, flip_vertically=True))
    assert flipped == plain[::-1]


def test_bmp_zero_height_writes_only_header():
    out = encode_bmp(4, 0, 3, b"")
    assert struct.unpack_from("<I", out, 2)[0] == len(out)
    assert struct.unpack_from("<I", out, 10)[0] == len(out)


@pytest.mark.parametrize("encoder", [encode_bmp, encode_tga])
def test_negative_size_rejected(encoder):
    with pytest.raises(ValueError):
        encoder(-1, 2, 3, b"")


@pytest.mark.parametrize("encoder", [encode_bmp, encode_tga])
def test_short_data_rejected(encoder):
    with pytest.raises(ValueError):
        encoder(4, 4, 3, bytes(10))


@pytest.mark.parametrize("comp", [1, 2, 3, 4])
@pytest.mark.parametrize("rle", [False, True])
def test_tga_round_trip(comp, rle):
    data = _image(5, 3, comp)
    out = encode_tga(5, 3, comp, data, rle=rle)
    width, height, bpp, pixels = _decode_tga(out)
    assert (width, height, bpp) == (5, 3, comp)
    assert _tga_to_input_order(pixels, comp) == data


def test_tga_header_types():
    assert encode_tga(1, 1, 3, b"abc", rle=False)[2] == 2
    assert encode_tga(1, 1, 1, b"a", rle=False)[2] == 3
    assert encode_tga(1, 1, 3, b"abc", rle=True)[2] == 2 + 8
    rgba = encode_tga(1, 1, 4, b"abcd", rle=False)
    assert rgba[16] == 32
    assert rgba[17] == 8


def test_tga_rle_long_runs_and_mixed_rows():
    width, height = 300, 2
    row0 = bytes([9, 9, 9]) * 200 + _image(100, 1, 3)
    row1 = _image(150, 1, 3, seed=3) + bytes([1, 2, 3]) * 150
    data = row0 + row1
    out = encode_tga(width, height, 3, data, rle=True)
    _, _, _, pixels = _decode_tga(out)
    assert _tga_to_input_order(pixels, 3) == data


def test_tga_rle_compresses_uniform_image():
    data = bytes([40, 50, 60]) * 64
    assert len(encode_tga(64, 1, 3, data, rle=True)) < len(encode_tga(64, 1, 3, data, rle=False))


def test_tga_flip_round_trip():
    data = _image(4, 3, 3)
    _, _, _, pixels = _decode_tga(encode_tga(4, 3, 3, data, flip_vertically=True))
    rows = [data[j * 12:(j + 1) * 12] for j in range(3)]
    assert _tga_to_input_order(pixels, 3) == b"".join(rows[::-1])


def test_linear_to_rgbe_black_and_worked_example():
    assert linear_to_rgbe(0.0, 0.0, 0.0) == (0, 0, 0, 0)
    assert linear_to_rgbe(1.0, 0.5, 0.25) == (128, 64, 32, 129)


@pytest.mark.parametrize("rgb", [(0.3, 2.5, 17.0), (1e-3, 4e-4, 0.0), (123.0, 0.1, 45.0)])
def test_linear_to_rgbe_recovers_largest_component(rgb):
    r, g, b, e = linear_to_rgbe(*rgb)
    largest = max(rgb)
    decoded = max(r, g, b) * math.ldexp(1.0, e - 136)
    assert decoded == pytest.approx(largest, rel=1 / 64)
    assert 128 <= max(r, g, b) <= 255


def test_hdr_header_and_small_width_unencoded():
    data = [0.5, 0.25, 1.0] * 6
    out = encode_hdr(3, 2, 3, data)
    assert out.startswith(b"#?RADIANCE\n")
    assert b"FORMAT=32-bit_rle_rgbe\n" in out
    assert b"-Y 2 +X 3\n" in out
    rows = _decode_hdr(out)
    assert rows == [[linear_to_rgbe(0.5, 0.25, 1.0)] * 3] * 2


def test_hdr_run_length_round_trip():
    width, height = 20, 3
    data = []
    for y in range(height):
        for x in range(width):
            if x < 12:
                data.extend([1.0, 0.5, 0.25])
            else:
                data.extend([x * 0.1 + y, y * 0.3, 0.05 * x])
    rows = _decode_hdr(encode_hdr(width, height, 3, data))
    for y, row in enumerate(rows):
        base = y * width * 3
        expected = [linear_to_rgbe(*data[base + 3 * x:base + 3 * x + 3]) for x in range(width)]
        assert row == expected


def test_hdr_mono_replicates_and_flip():
    data = [float(i) for i in range(2 * 10)]
    rows = _decode_hdr(encode_hdr(10, 2, 1, data, flip_vertically=True))
    assert rows[0] == [linear_to_rgbe(v, v, v) for v in data[10:]]
    assert rows[1] == [linear_to_rgbe(v, v, v) for v in data[:10]]


@pytest.mark.parametrize("size", [(0, 2), (2, 0), (-1, 3)])
def test_hdr_rejects_empty_sizes(size):
    with pytest.raises(ValueError):
        encode_hdr(size[0], size[1], 3, [0.0] * 12)


def test_hdr_rejects_missing_data():
    with pytest.raises(ValueError):
        encode_hdr(1, 1, 3, None)


def test_write_functions_store_encoded_bytes(tmp_path):
    data = _image(3, 3, 3)
    floats = [v / 255 for v in data]
    write_bmp(tmp_path / "a.bmp", 3, 3, 3, data)
    write_tga(tmp_path / "a.tga", 3, 3, 3, data, rle=False)
    write_hdr(tmp_path / "a.hdr", 3, 3, 3, floats)
    assert (tmp_path / "a.bmp").read_bytes() == encode_bmp(3, 3, 3, data)
    assert (tmp_path / "a.tga").read_bytes() == encode_tga(3, 3, 3, data, rle=False)
    assert (tmp_path / "a.hdr").read_bytes() == encode_hdr(3, 3, 3, floats)