import os

import pytest
from PIL import Image

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
pytest.importorskip("PySide6.QtWidgets")

from PySide6.QtCore import QTimer  # noqa: E402

import fill2paint_gui  # noqa: E402


@pytest.fixture(autouse=True)
def _close_windows():
    yield
    fill2paint_gui.close_all()


def test_pil_to_pixmap_keeps_size():
    fill2paint_gui._app()
    pixmap = fill2paint_gui.pil_to_pixmap(Image.new("RGB", (7, 3), (1, 2, 3)))

    assert (pixmap.width(), pixmap.height()) == (7, 3)


def test_show_opens_titled_window():
    window = fill2paint_gui.show("fill2paint_circles", Image.new("RGB", (20, 40)))

    assert window.windowTitle() == "fill2paint_circles"
    assert window.isVisible()


def test_wait_for_key_without_windows_returns():
    fill2paint_gui.wait_for_key()


def test_key_press_ends_wait_and_closes_windows():
    first = fill2paint_gui.show("a", Image.new("RGB", (10, 10)))
    fill2paint_gui.show("b", Image.new("RGB", (10, 10)))
    QTimer.singleShot(0, first.key_pressed.emit)

    fill2paint_gui.wait_for_key()

    assert fill2paint_gui._windows == []
    assert not first.isVisible()
