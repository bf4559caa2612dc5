"""
Tests for the image padder.
Run: python -m pytest test_padder.py -v
"""
from pathlib import Path

import pytest
from PIL import Image

from oet_catalog.padder import compute_padding, pad_folder, pad_image


def make_png(path: Path, width: int, height: int, color=(200, 30, 30, 255)) -> Path:
    Image.new("RGBA", (width, height), color).save(path, format="PNG")
    return path


@pytest.mark.parametrize(
    "height, expected",
    [
        (30, (10, 10)),
        (29, (10, 11)),
        (49, (0, 1)),
        (50, (0, 0)),
        (51, (0, 0)),
    ],
)
def test_compute_padding(height, expected):
    assert compute_padding(height, 50) == expected


def test_short_image_is_centered_on_transparent_canvas(tmp_path):
    """Height 30 with threshold 50 -> 10 rows on top, 10 at the bottom, width unchanged."""
    src = make_png(tmp_path / "7.png", 40, 30)
    dst = tmp_path / "out.png"

    assert pad_image(src, dst, 50) == "padded"

    with Image.open(dst) as out:
        assert out.size == (40, 50)
        assert out.mode == "RGBA"
        assert out.getpixel((0, 0))[3] == 0
        assert out.getpixel((0, 9))[3] == 0
        assert out.getpixel((0, 10)) == (200, 30, 30, 255)
        assert out.getpixel((39, 39)) == (200, 30, 30, 255)
        assert out.getpixel((0, 40))[3] == 0
        assert out.getpixel((0, 49))[3] == 0


def test_odd_deficit_puts_extra_row_at_bottom(tmp_path):
    src = make_png(tmp_path / "a.png", 5, 29)
    dst = tmp_path / "b.png"
    pad_image(src, dst, 50)
    with Image.open(dst) as out:
        assert out.height == 50
        assert out.getpixel((0, 9))[3] == 0
        assert out.getpixel((0, 10))[3] == 255
        assert out.getpixel((0, 38))[3] == 255
        assert out.getpixel((0, 39))[3] == 0


def test_rgb_input_is_padded_with_transparency(tmp_path):
    src = tmp_path / "rgb.png"
    Image.new("RGB", (10, 20), (0, 0, 255)).save(src)
    dst = tmp_path / "rgb_out.png"
    pad_image(src, dst, 50)
    with Image.open(dst) as out:
        assert out.mode == "RGBA"
        assert out.getpixel((0, 0)) == (0, 0, 0, 0)
        assert out.getpixel((0, 15)) == (0, 0, 255, 255)


def test_tall_image_is_copied_byte_identical(tmp_path):
    """Height 51 with threshold 50 -> unchanged copy."""
    src = make_png(tmp_path / "3.png", 20, 51)
    dst = tmp_path / "copy.png"

    assert pad_image(src, dst, 50) == "copied"
    assert dst.read_bytes() == src.read_bytes()
    with Image.open(dst) as out:
        assert out.height == 51


def test_image_at_threshold_is_copied(tmp_path):
    src = make_png(tmp_path / "4.png", 20, 50)
    dst = tmp_path / "copy.png"
    assert pad_image(src, dst, 50) == "copied"
    assert dst.read_bytes() == src.read_bytes()


def test_pad_folder_processes_matching_files(tmp_path):
    src_dir = tmp_path / "scraped"
    src_dir.mkdir()
    make_png(src_dir / "1.png", 30, 20)
    make_png(src_dir / "2.PNG", 30, 80)
    (src_dir / "1.json").write_text("{}", encoding="utf-8")
    out_dir = tmp_path / "nested" / "padded"

    stats = pad_folder(src_dir, out_dir, 50)

    assert out_dir.is_dir()
    assert stats == {"padded": 1, "copied": 1, "errors": 0}
    assert sorted(p.name for p in out_dir.iterdir()) == ["1.png", "2.PNG"]
    with Image.open(out_dir / "1.png") as out:
        assert out.size == (30, 50)
    assert (out_dir / "2.PNG").read_bytes() == (src_dir / "2.PNG").read_bytes()


def test_pad_folder_skips_unreadable_file_and_continues(tmp_path):
    src_dir = tmp_path / "scraped"
    src_dir.mkdir()
    (src_dir / "1.png").write_bytes(b"not an image")
    make_png(src_dir / "2.png", 10, 10)
    out_dir = tmp_path / "padded"

    stats = pad_folder(src_dir, out_dir, 50)

    assert stats == {"padded": 1, "copied": 0, "errors": 1}
    assert not (out_dir / "1.png").exists()
    assert (out_dir / "2.png").exists()


def test_padding_is_deterministic(tmp_path):
    src = make_png(tmp_path / "x.png", 17, 33)
    first, second = tmp_path / "first.png", tmp_path / "second.png"
    pad_image(src, first, 50)
    pad_image(src, second, 50)
    assert first.read_bytes() == second.read_bytes()
