"""Fill2Paint - paint-by-number grid generator

Converts pixel art images into enlarged grid templates, either as colored
circles or as numbered cells with a color legend.
"""
# /// script
# requires-python = ">=3.10"
# dependencies = [
#     "numpy",
#     "pillow",
#     "PySide6",
# ]
# ///

import argparse
import logging
import sys
from collections import Counter
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
MODES = ("circles", "numbers")
LEGEND_ORDERS = ("label", "color")
CELL_SIZE = 10
CELL_THICKNESS = 1
CIRCLE_RATIO = 1.0 / 6
GRID_COLOR = 100
SWATCH_WIDTH = 50
LABEL_FONT_SIZE = 12
LEGEND_FONT_SIZE = 24
BG_COLOR = (255, 255, 255)

# CLI defaults
CIRCLES_CELL_SIZE = 12
NUMBERS_CELL_SIZE = 15
CIRCLES_OUTPUT = "/tmp/fill2paint_circles.png"
NUMBERS_OUTPUT = "/tmp/fill2paint_numbers.png"
PLAIN_OUTPUT = "/tmp/fill2paint.png"


class ImageReadError(Exception):
    """Raised when a source image cannot be opened or decoded."""

    def __init__(self, path, reason: str):
        super().__init__(f"cannot read image '{path}': {reason}")
        self.path = path
        self.reason = reason


# ---------------------------------------------------------------------------
# Image I/O
# ---------------------------------------------------------------------------

def read_image(path) -> np.ndarray:
    """Load an image as an (H, W, 3) uint8 RGB array."""
    try:
        with Image.open(path) as img:
            return np.array(img.convert("RGB"))
    except FileNotFoundError as e:
        raise ImageReadError(path, "no such file") from e
    except UnidentifiedImageError as e:
        raise ImageReadError(path, "unsupported or corrupt image format") from e
    except OSError as e:
        raise ImageReadError(path, str(e)) from e


def write_image(path, img: Image.Image) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    img.save(str(path))
    return path


# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------

def _load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Try to load a monospace system font, fall back to default."""
    candidates = [
        "/System/Library/Fonts/Menlo.ttc",
        "/System/Library/Fonts/SFNSMono.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
        "consola.ttf",
    ]
    for path in candidates:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    return ImageFont.load_default(size)


def _draw_text_baseline(draw: ImageDraw.ImageDraw, x: int, y: int, text: str,
                        font, fill: tuple[int, int, int],
                        stroke_width: int = 0) -> None:
    """Draw text so its glyphs sit on the horizontal line y, starting at x."""
    bbox = draw.textbbox((0, 0), text, font=font)
    draw.text((x, y - bbox[3]), text, fill=fill, font=font,
              stroke_width=stroke_width, stroke_fill=fill)


# ---------------------------------------------------------------------------
# Color catalog
# ---------------------------------------------------------------------------

def build_color_catalog(src: np.ndarray) -> dict[tuple[int, int, int], str]:
    """Assign labels "1".."N" to distinct colors in row-major first-seen order.

    Colors are compared by exact channel equality. The returned dict keeps
    label order.
    """
    flat = src.reshape(-1, 3)
    colors, first_seen = np.unique(flat, axis=0, return_index=True)
    order = np.argsort(first_seen, kind="stable")
    return {
        tuple(int(v) for v in colors[i]): str(n + 1)
        for n, i in enumerate(order)
    }


def sorted_catalog(
    catalog: dict[tuple[int, int, int], str]
) -> list[tuple[tuple[int, int, int], str]]:
    """Catalog entries ordered by blue, then green, then red.

    Matches the BGR channel order the legend was originally sorted in.
    """
    return sorted(catalog.items(), key=lambda item: item[0][::-1])


def color_usage(src: np.ndarray,
                catalog: dict[tuple[int, int, int], str]) -> Counter[str]:
    """Count how many cells carry each catalog label."""
    flat = src.reshape(-1, 3)
    colors, counts = np.unique(flat, axis=0, return_counts=True)
    usage: Counter[str] = Counter()
    for color, count in zip(colors, counts):
        usage[catalog[tuple(int(v) for v in color)]] = int(count)
    return usage


# ---------------------------------------------------------------------------
# Rendering stages
# ---------------------------------------------------------------------------

def _gray(level: int) -> tuple[int, int, int]:
    return (level, level, level)


def draw_grid(rows: int, cols: int, cell_size: int = CELL_SIZE,
              cell_thickness: int = CELL_THICKNESS,
              grid_color: int = GRID_COLOR) -> Image.Image:
    """White canvas with a line along the top edge of every row and the left
    edge of every column."""
    w = cols * cell_size
    h = rows * cell_size
    img = Image.new("RGB", (w, h), BG_COLOR)
    draw = ImageDraw.Draw(img)
    line_color = _gray(grid_color)
    for r in range(rows):
        y = r * cell_size
        draw.line([(0, y), (w, y)], fill=line_color, width=cell_thickness)
    for c in range(cols):
        x = c * cell_size
        draw.line([(x, 0), (x, h)], fill=line_color, width=cell_thickness)
    return img


def mark_cells(
    canvas: Image.Image, src: np.ndarray, mode: str,
    cell_size: int = CELL_SIZE,
    circle_ratio: float = CIRCLE_RATIO,
    grid_color: int = GRID_COLOR,
    catalog: dict[tuple[int, int, int], str] | None = None,
    font_size: int = LABEL_FONT_SIZE,
) -> Image.Image:
    """Draw one circle or one label per source pixel onto canvas (in place)."""
    n_rows, n_cols = src.shape[:2]
    draw = ImageDraw.Draw(canvas)
    radius = int(circle_ratio * cell_size)
    text_color = _gray(grid_color)
    font = None
    if mode == "numbers":
        if catalog is None:
            catalog = build_color_catalog(src)
        font = _load_font(font_size)

    for r in range(n_rows):
        bottom = (r + 1) * cell_size
        cy = bottom - cell_size // 2
        for c in range(n_cols):
            left = c * cell_size
            cx = left + cell_size // 2
            color = tuple(int(v) for v in src[r, c])
            if mode == "circles":
                draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius],
                             fill=color)
            elif mode == "numbers":
                _draw_text_baseline(draw, left + 2, bottom - 2, catalog[color],
                                    font, text_color)
    return canvas


def render_legend(
    entries: list[tuple[tuple[int, int, int], str]],
    swatch_width: int = SWATCH_WIDTH,
    font_size: int = LEGEND_FONT_SIZE,
) -> Image.Image:
    """Horizontal strip of square swatches, each overlaid with its label.

    Labels are drawn white with a heavy stroke and then black on top, so they
    stay readable on any swatch color.
    """
    img = Image.new("RGB", (len(entries) * swatch_width, swatch_width), BG_COLOR)
    draw = ImageDraw.Draw(img)
    font = _load_font(font_size)
    for i, (color, label) in enumerate(entries):
        x0 = i * swatch_width
        draw.rectangle([x0, 0, x0 + swatch_width - 1, swatch_width - 1],
                       fill=color)
        tx = x0 + swatch_width // 3
        ty = 2 * swatch_width // 3
        _draw_text_baseline(draw, tx, ty, label, font, (255, 255, 255),
                            stroke_width=2)
        _draw_text_baseline(draw, tx, ty, label, font, (0, 0, 0))
    return img


def stack_legend(legend: Image.Image, canvas: Image.Image) -> Image.Image:
    """Paste legend above canvas on a white sheet as wide as the wider one."""
    w = max(canvas.width, legend.width)
    h = legend.height + canvas.height
    sheet = Image.new("RGB", (w, h), BG_COLOR)
    sheet.paste(legend, (0, 0))
    sheet.paste(canvas, (0, legend.height))
    return sheet


def normalize_orientation(img: Image.Image) -> Image.Image:
    """Rotate 90 degrees counter-clockwise when wider than tall."""
    if img.width > img.height:
        return img.transpose(Image.Transpose.ROTATE_90)
    return img


def render(
    src: np.ndarray,
    mode: str = "circles",
    cell_size: int = CELL_SIZE,
    cell_thickness: int = CELL_THICKNESS,
    circle_ratio: float = CIRCLE_RATIO,
    grid_color: int = GRID_COLOR,
    legend: bool = True,
    legend_order: str = "label",
    swatch_width: int = SWATCH_WIDTH,
    label_font_size: int = LABEL_FONT_SIZE,
    legend_font_size: int = LEGEND_FONT_SIZE,
) -> Image.Image:
    """Render the grid template for a pixel art image.

    mode: "circles" draws a filled circle per cell in the pixel color,
        "numbers" draws the color's catalog label and, if legend is set,
        stacks a swatch legend above the grid.
    legend_order: "label" lists swatches by ascending label, "color" by
        ascending color tuple.
    """
    if mode not in MODES:
        raise ValueError(f"Unknown mode {mode!r}, expected one of {MODES}")
    if legend_order not in LEGEND_ORDERS:
        raise ValueError(
            f"Unknown legend order {legend_order!r}, expected one of {LEGEND_ORDERS}")
    if src.ndim != 3 or src.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) color image, got shape {src.shape}")
    if src.shape[0] == 0 or src.shape[1] == 0:
        raise ValueError("Source image is empty")

    n_rows, n_cols = src.shape[:2]
    logger.debug("render(%dx%d, mode=%s, cell_size=%d)",
                 n_cols, n_rows, mode, cell_size)

    catalog = build_color_catalog(src) if mode == "numbers" else None

    out = draw_grid(n_rows, n_cols, cell_size, cell_thickness, grid_color)
    mark_cells(out, src, mode, cell_size, circle_ratio, grid_color,
               catalog=catalog, font_size=label_font_size)

    if mode == "numbers" and legend:
        logger.debug("%d colors", len(catalog))
        if legend_order == "color":
            entries = sorted_catalog(catalog)
        else:
            entries = list(catalog.items())
        strip = render_legend(entries, swatch_width, legend_font_size)
        out = stack_legend(strip, out)

    return normalize_orientation(out)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return n


def _ratio(value: str) -> float:
    x = float(value)
    if not 0.0 < x <= 1.0:
        raise argparse.ArgumentTypeError(f"must be in (0, 1], got {value}")
    return x


def _gray_level(value: str) -> int:
    n = int(value)
    if not 0 <= n <= 255:
        raise argparse.ArgumentTypeError(f"must be in 0..255, got {value}")
    return n


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", help="Input pixel art image path")
    parser.add_argument("--thickness", type=_positive_int, default=CELL_THICKNESS,
                        help=f"Grid line width (default: {CELL_THICKNESS})")
    parser.add_argument("--circle-ratio", type=_ratio, default=CIRCLE_RATIO,
                        help="Circle radius as a fraction of the cell size "
                             "(default: 1/6)")
    parser.add_argument("--grid-color", type=_gray_level, default=GRID_COLOR,
                        help=f"Gray level of grid lines and labels (default: {GRID_COLOR})")
    parser.add_argument("--no-show", action="store_true",
                        help="Do not open preview windows")


def _load_source(path: str) -> np.ndarray:
    print(f"Loading image: {path}")
    try:
        img = read_image(path)
    except ImageReadError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"  Image size: {img.shape[1]}x{img.shape[0]}")
    return img


def _save(path: str, img: Image.Image) -> None:
    try:
        saved = write_image(path, img)
    except (OSError, ValueError) as e:
        print(f"Error: cannot write image '{path}': {e}", file=sys.stderr)
        sys.exit(1)
    print(f"Saved: {saved}")


def _print_usage_summary(src: np.ndarray) -> None:
    catalog = build_color_catalog(src)
    usage = color_usage(src, catalog)
    print(f"\nColor usage ({len(catalog)} colors, {sum(usage.values())} cells total):")
    for color, label in catalog.items():
        print(f"  {label:>4s}: {usage[label]:4d}  "
              f"#{color[0]:02X}{color[1]:02X}{color[2]:02X}")


def _show_and_wait(images: list[tuple[str, Image.Image]]) -> None:
    import fill2paint_gui

    for title, img in images:
        fill2paint_gui.show(title, img)
    fill2paint_gui.wait_for_key()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Fill2Paint - render pixel art as circle and number grids"
    )
    _add_common_args(parser)
    parser.add_argument("--circles-output", default=CIRCLES_OUTPUT,
                        help=f"Circles image path (default: {CIRCLES_OUTPUT})")
    parser.add_argument("--numbers-output", default=NUMBERS_OUTPUT,
                        help=f"Numbers image path (default: {NUMBERS_OUTPUT})")
    parser.add_argument("--circles-cell-size", type=_positive_int,
                        default=CIRCLES_CELL_SIZE,
                        help=f"Cell size of the circles grid (default: {CIRCLES_CELL_SIZE})")
    parser.add_argument("--numbers-cell-size", type=_positive_int,
                        default=NUMBERS_CELL_SIZE,
                        help=f"Cell size of the numbers grid (default: {NUMBERS_CELL_SIZE})")
    parser.add_argument("--swatch-width", type=_positive_int, default=SWATCH_WIDTH,
                        help=f"Legend swatch width (default: {SWATCH_WIDTH})")
    parser.add_argument("--legend-order", choices=LEGEND_ORDERS, default="label",
                        help="Legend swatch order: label=by number (default), "
                             "color=by color value")
    args = parser.parse_args(argv)

    src = _load_source(args.input)

    print("Rendering circles...")
    out_circles = render(
        src, "circles", args.circles_cell_size, args.thickness,
        args.circle_ratio, args.grid_color,
    )
    _save(args.circles_output, out_circles)

    print("Rendering numbers...")
    out_numbers = render(
        src, "numbers", args.numbers_cell_size, args.thickness,
        args.circle_ratio, args.grid_color,
        legend_order=args.legend_order, swatch_width=args.swatch_width,
    )
    _save(args.numbers_output, out_numbers)

    _print_usage_summary(src)

    if not args.no_show:
        _show_and_wait([("fill2paint_circles", out_circles),
                        ("fill2paint_numbers", out_numbers)])


def main_circles(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Fill2Paint - render pixel art as a circle grid"
    )
    _add_common_args(parser)
    parser.add_argument("-o", "--output", default=PLAIN_OUTPUT,
                        help=f"Output image path (default: {PLAIN_OUTPUT})")
    parser.add_argument("-c", "--cell-size", type=_positive_int, default=CELL_SIZE,
                        help=f"Output cell size in pixels (default: {CELL_SIZE})")
    args = parser.parse_args(argv)

    src = _load_source(args.input)

    print("Rendering circles...")
    out = render(src, "circles", args.cell_size, args.thickness,
                 args.circle_ratio, args.grid_color)
    _save(args.output, out)

    if not args.no_show:
        _show_and_wait([("fill2paint", out)])


if __name__ == "__main__":
    main()
