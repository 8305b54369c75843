"""
RU: Подпись под штрихкодом: подбор максимального размера шрифта под полосу W x H
    и равномерное растяжение короткой подписи пробелами.
EN: Caption compositor. Renders caption text into a band of exact size, with the
    largest font that fits both axes, optionally stretched with inserted spaces.

Algorithm:
    1. Measure the caption at a probe size (50) in the requested family.
    2. Scale the probe size by min(H / measured_height, W / measured_width).
    3. Optionally find the smallest space count whose padded caption reaches W;
       the band shows one space fewer (the widest padding that still fits).
    4. Draw black text with its ink box centered on a white band.

Requirements: Pillow >= 10.1 (float font sizes, scalable default font)
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Final, List, Optional, Tuple, Union

from PIL import Image, ImageDraw, ImageFont
from PIL.ImageFont import FreeTypeFont
from PIL.ImageFont import ImageFont as PILImageFont

logger = logging.getLogger(__name__)

__all__ = [
    "PROBE_FONT_SIZE",
    "CaptionFont",
    "find_space_count",
    "fit_font_size",
    "ink_box",
    "load_caption_font",
    "measure_text",
    "pad_characters",
    "resolve_font_source",
    "text_to_image",
]

PROBE_FONT_SIZE: Final[int] = 50
MIN_FONT_SIZE: Final[float] = 1.0

# Ниже этой доли высоты строки подпись меряется по строке, а не по ink-box
MIN_INK_TO_LINE_RATIO: Final[float] = 0.25

CaptionFont = Union[FreeTypeFont, PILImageFont]

_MONO_FILES: Final[Tuple[str, ...]] = (
    "cour.ttf",
    "Courier New.ttf",
    "CourierNew.ttf",
    "LiberationMono-Regular.ttf",
    "DejaVuSansMono.ttf",
    "FreeMono.ttf",
)
_SANS_FILES: Final[Tuple[str, ...]] = (
    "arial.ttf",
    "Arial.ttf",
    "LiberationSans-Regular.ttf",
    "DejaVuSans.ttf",
    "FreeSans.ttf",
)
_SERIF_FILES: Final[Tuple[str, ...]] = (
    "times.ttf",
    "Times New Roman.ttf",
    "LiberationSerif-Regular.ttf",
    "DejaVuSerif.ttf",
    "FreeSerif.ttf",
)

# Имя семейства (в нижнем регистре) -> файлы шрифтов в порядке предпочтения
_FONT_FILES: Final[Dict[str, Tuple[str, ...]]] = {
    "courier new": _MONO_FILES,
    "courier": _MONO_FILES,
    "monospace": _MONO_FILES,
    "arial": _SANS_FILES,
    "helvetica": _SANS_FILES,
    "sans-serif": _SANS_FILES,
    "times new roman": _SERIF_FILES,
    "times": _SERIF_FILES,
    "serif": _SERIF_FILES,
}


def resolve_font_source(family: str) -> Optional[str]:
    """Return the first loadable font file for ``family``.

    Known family names map to their usual file names on Windows, macOS and
    Linux; any other name is tried as a file name or path. ``None`` means
    Pillow's bundled default font.
    """
    candidates: List[str] = list(_FONT_FILES.get(family.strip().lower(), ()))
    candidates += [family, f"{family}.ttf"]
    for name in candidates:
        try:
            ImageFont.truetype(name, PROBE_FONT_SIZE)
        except OSError:
            continue
        logger.debug("Caption font %r resolved to %r", family, name)
        return name
    logger.warning("Caption font family %r not found; using Pillow default font", family)
    return None


def load_caption_font(source: Optional[str], size: float) -> CaptionFont:
    """Load a font from a source returned by :func:`resolve_font_source`."""
    if source is None:
        return ImageFont.load_default(size)
    return ImageFont.truetype(source, size)


def measure_text(text: str, font: CaptionFont) -> Tuple[float, float]:
    """Return (advance width, text box height) of ``text``.

    The width is the advance length, so leading and trailing spaces count.
    """
    _, top, _, bottom = font.getbbox(text)
    return float(font.getlength(text)), float(bottom - top)


def ink_box(text: str, font: CaptionFont) -> Optional[Tuple[int, int, int, int]]:
    """Box of the pixels ``text`` actually paints, relative to the draw origin.

    ``getbbox`` always spans the pen origin and the advance, so side bearings,
    spaces and marks that do not touch the baseline are not visible in it.
    Returns None when nothing is painted.
    """
    left, top, right, bottom = font.getbbox(text)
    size = (max(1, math.ceil(right - left)), max(1, math.ceil(bottom - top)))
    with Image.new("L", size, 0) as mask:
        ImageDraw.Draw(mask).text((-left, -top), text, font=font, fill=255)
        painted = mask.getbbox()
    if painted is None:
        return None
    return (
        painted[0] + left,
        painted[1] + top,
        painted[2] + left,
        painted[3] + top,
    )


def fit_font_size(
    text: str,
    width: int,
    height: int,
    font_source: Optional[str],
    probe_size: int = PROBE_FONT_SIZE,
) -> Optional[float]:
    """
    Largest font size at which ``text`` fits a ``width`` x ``height`` band.

    The tighter of the two axis ratios scales the probe size, so the text
    touches the band on the binding axis and never overflows the other.

    Width is the advance length and height is the text box height. Flat
    captions such as "-" or "..." have almost no ink; when their ink height is
    below MIN_INK_TO_LINE_RATIO of the line height (ascent + descent) the line
    height is used instead, so they are not blown up to fill the width only.

    Returns:
        The font size (at least MIN_FONT_SIZE), or None when the text has no
        measurable extent.
    """
    probe = load_caption_font(font_source, probe_size)
    measured_width, measured_height = measure_text(text, probe)
    if measured_width <= 0 or measured_height <= 0:
        return None
    getmetrics = getattr(probe, "getmetrics", None)
    ink = ink_box(text, probe)
    if getmetrics is not None and ink is not None:
        ascent, descent = getmetrics()
        line_height = float(ascent + descent)
        ink_height = ink[3] - ink[1]
        if ink_height < line_height * MIN_INK_TO_LINE_RATIO:
            logger.debug(
                "Caption %r: ink height %.1f below line height %.1f, measuring by line",
                text,
                ink_height,
                line_height,
            )
            measured_height = line_height
    height_ratio = height / measured_height
    width_ratio = width / measured_width
    font_size = probe_size * min(height_ratio, width_ratio)
    logger.debug(
        "Caption %r: probe=%dx%d ratios h=%.3f w=%.3f -> size %.2f",
        text,
        measured_width,
        measured_height,
        height_ratio,
        width_ratio,
        font_size,
    )
    return max(MIN_FONT_SIZE, font_size)


def pad_characters(text: Optional[str], space_count: int) -> Optional[str]:
    """
    Surround every character with ``space_count`` spaces.

    >>> pad_characters("AB", 2)
    '  A  B  '

    Blank or missing text and non-positive counts are returned unchanged.
    """
    if text is None or not text.strip() or space_count <= 0:
        return text
    spaces = " " * space_count
    return spaces + "".join(character + spaces for character in text)


def find_space_count(
    text: str,
    font: CaptionFont,
    width: int,
    max_count: Optional[int] = None,
) -> int:
    """
    Smallest non-negative space count whose padded ``text`` measures at least ``width``.

    Linear search from zero. The search stops at ``max_count`` (default:
    ``width``, one pixel per step) and logs a warning when it does.
    """
    if not text.strip():
        return 0
    limit = width if max_count is None else max_count
    count = 0
    while measure_text(pad_characters(text, count), font)[0] < width:
        if count >= limit:
            logger.warning(
                "Character spacing search for %r stopped at %d spaces (band width %d)",
                text,
                count,
                width,
            )
            break
        count += 1
    return count


def text_to_image(
    text: Optional[str],
    width: int,
    height: int,
    font_family: str,
    add_character_spacing: bool = False,
    probe_size: int = PROBE_FONT_SIZE,
    max_spacing_iterations: Optional[int] = None,
) -> Image.Image:
    """
    Render ``text`` into a new white RGB image of exactly ``width`` x ``height``.

    Args:
        text: Caption text. Blank text yields a plain white band.
        width: Band width in pixels (> 0).
        height: Band height in pixels (> 0).
        font_family: Font family name or font file.
        add_character_spacing: Stretch the caption towards the band width with spaces.
        probe_size: Reference font size used for measuring.
        max_spacing_iterations: Upper bound for the space search (None: band width).

    Returns:
        New Image.Image owned by the caller.

    Raises:
        ValueError: for a non-positive band size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Caption band must be positive, got {width}x{height}")

    font: Optional[CaptionFont] = None
    if text is not None and text.strip():
        source = resolve_font_source(font_family)
        font_size = fit_font_size(text, width, height, source, probe_size)
        if font_size is not None:
            font = load_caption_font(source, font_size)
            if add_character_spacing:
                count = find_space_count(text, font, width, max_spacing_iterations)
                # Первое значение, достигшее ширины полосы, уже выходит за неё
                if count > 0 and measure_text(pad_characters(text, count), font)[0] >= width:
                    count -= 1
                text = pad_characters(text, count)

    bmp = Image.new("RGB", (width, height), "white")
    if font is None or text is None:
        logger.debug("Blank caption band %dx%d", width, height)
        return bmp

    # Центрируем сами глифы, а не ширину продвижения
    left, top, right, bottom = ink_box(text, font) or font.getbbox(text)
    x = (width - (right - left)) / 2 - left
    y = (height - (bottom - top)) / 2 - top
    ImageDraw.Draw(bmp).text((x, y), text, font=font, fill="black")
    return bmp
