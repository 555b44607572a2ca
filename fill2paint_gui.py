"""Fill2Paint preview windows"""
# /// script
# requires-python = ">=3.10"
# dependencies = [
#     "numpy",
#     "pillow",
#     "PySide6",
# ]
# ///

import sys

from PIL import Image
from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QImage, QKeyEvent, QPainter, QPixmap, QWheelEvent
from PySide6.QtWidgets import (
    QApplication, QGraphicsPixmapItem, QGraphicsScene, QGraphicsView, QWidget,
)

# Windows opened by show() and not yet closed by wait_for_key()
_windows: list["ImageWindow"] = []


# ---------------------------------------------------------------------------
# Utility
# ---------------------------------------------------------------------------

def pil_to_pixmap(pil_img: Image.Image) -> QPixmap:
    """Convert PIL Image to QPixmap."""
    data = pil_img.convert("RGBA").tobytes()
    qimg = QImage(data, pil_img.width, pil_img.height, QImage.Format.Format_RGBA8888)
    # QImage does not own data; copy before it goes out of scope
    return QPixmap.fromImage(qimg.copy())


def _app() -> QApplication:
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    return app


# ---------------------------------------------------------------------------
# ImageWindow - zoomable image display that reports key presses
# ---------------------------------------------------------------------------

class ImageWindow(QGraphicsView):
    """Top-level zoomable image view.

    Zoom is clamped so the image can never be smaller than fit-in-view.
    Emits key_pressed on any key.
    """

    key_pressed = Signal()

    def __init__(self, title: str, pil_img: Image.Image,
                 parent: QWidget | None = None):
        super().__init__(parent)
        self.setWindowTitle(title)
        self._scene = QGraphicsScene(self)
        self.setScene(self._scene)
        self._zoom_level: float = 1.0  # 1.0 = fit-in-view
        # Cells are hard-edged; keep them crisp when zoomed
        self.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, False)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self._pixmap_item: QGraphicsPixmapItem = self._scene.addPixmap(
            pil_to_pixmap(pil_img))
        self._scene.setSceneRect(self._pixmap_item.boundingRect())
        self.resize(min(pil_img.width + 4, 1200), min(pil_img.height + 4, 900))

    def keyPressEvent(self, event: QKeyEvent) -> None:  # type: ignore[override]
        self.key_pressed.emit()

    def wheelEvent(self, event: QWheelEvent) -> None:  # type: ignore[override]
        if event.angleDelta().y() > 0:
            self._zoom_level *= 1.15
            self.scale(1.15, 1.15)
        else:
            new_level = self._zoom_level / 1.15
            if new_level <= 1.0:
                self._zoom_level = 1.0
                self.resetTransform()
                self.fitInView(self._pixmap_item,
                               Qt.AspectRatioMode.KeepAspectRatio)
            else:
                self._zoom_level = new_level
                self.scale(1 / 1.15, 1 / 1.15)

    def resizeEvent(self, event):  # type: ignore[override]
        super().resizeEvent(event)
        if self._zoom_level <= 1.0:
            self.fitInView(self._pixmap_item,
                           Qt.AspectRatioMode.KeepAspectRatio)


# ---------------------------------------------------------------------------
# Display collaborator
# ---------------------------------------------------------------------------

def show(title: str, pil_img: Image.Image) -> ImageWindow:
    """Open a window showing pil_img. Does not block."""
    app = _app()
    window = ImageWindow(title, pil_img)
    window.key_pressed.connect(app.quit)
    window.show()
    _windows.append(window)
    return window


def close_all() -> None:
    while _windows:
        _windows.pop().close()


def wait_for_key() -> None:
    """Block until a key is pressed in any shown window, then close them all."""
    if not _windows:
        return
    app = _app()
    app.setQuitOnLastWindowClosed(True)
    app.exec()
    close_all()
