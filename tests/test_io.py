import numpy as np
import pytest
from PIL import Image

import fill2paint


def test_read_image_returns_rgb_array(tmp_path):
    path = tmp_path / "art.png"
    Image.new("RGB", (3, 2), (10, 20, 30)).save(path)

    arr = fill2paint.read_image(path)

    assert arr.shape == (2, 3, 3)
    assert arr.dtype == np.uint8
    assert tuple(arr[1, 2]) == (10, 20, 30)


def test_read_image_drops_alpha(tmp_path):
    path = tmp_path / "art.png"
    Image.new("RGBA", (2, 2), (1, 2, 3, 128)).save(path)

    arr = fill2paint.read_image(path)

    assert arr.shape == (2, 2, 3)


def test_read_image_missing_file(tmp_path):
    with pytest.raises(fill2paint.ImageReadError, match="no such file"):
        fill2paint.read_image(tmp_path / "missing.png")


def test_read_image_not_an_image(tmp_path):
    path = tmp_path / "notes.png"
    path.write_text("not really a png")

    with pytest.raises(fill2paint.ImageReadError) as excinfo:
        fill2paint.read_image(path)

    assert excinfo.value.path == path


def test_write_image_creates_parent_dirs(tmp_path):
    img = Image.new("RGB", (4, 4), (255, 0, 0))
    path = tmp_path / "out" / "nested" / "grid.png"

    saved = fill2paint.write_image(path, img)

    assert saved == path
    with Image.open(path) as reloaded:
        assert reloaded.size == (4, 4)
        assert reloaded.convert("RGB").getpixel((0, 0)) == (255, 0, 0)
