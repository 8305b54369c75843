"""
RU: Рендеринг линейных штрихкодов (Code 128, Code 39, EAN-13, EAN-8, UPC-A, ITF, Codabar) в растр заданного размера.
EN: Linear barcode renderer: python-barcode builds the module pattern, Pillow paints it.

Provides:
- PrintMetrics: canvas size and quiet zone for one draw call
- BarcodeGenerator: validate, get_print_metrics, encode_modules, draw
- BarcodeGenError

Requirements: Pillow, python-barcode
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import groupby
from typing import Any, Dict, Final, List, Optional, Set, Tuple, TypedDict

import barcode as pybarcode
from barcode.errors import BarcodeError, BarcodeNotFoundError
from PIL import Image, ImageDraw

from simple_barcode.model.enums import BarcodeSymbology

logger = logging.getLogger(__name__)

__all__ = [
    "BarcodeGenerator",
    "BarcodeGenError",
    "BarcodeOptions",
    "PrintMetrics",
]

# Максимальная сторона холста для предотвращения исчерпания памяти
MAX_CANVAS_SIDE: Final[int] = 10000

# Ширина пустой зоны по краям символа (в модулях)
DEFAULT_QUIET_ZONE: Final[int] = 10

# Допустимая длина без/с контрольной цифрой
_DIGIT_LENGTHS: Final[Dict[BarcodeSymbology, Tuple[int, int]]] = {
    BarcodeSymbology.EAN13: (12, 13),
    BarcodeSymbology.EAN8: (7, 8),
    BarcodeSymbology.UPCA: (11, 12),
}


class BarcodeOptions(TypedDict, total=False):
    """
    Типобезопасные опции линейного штрихкода.

    Все ключи, кроме quiet_zone, передаются в конструктор класса
    python-barcode для выбранной символики.

    Example:
        >>> options: BarcodeOptions = {"quiet_zone": 4, "add_checksum": False}
        >>> gen = BarcodeGenerator(BarcodeSymbology.CODE39, options)
    """

    quiet_zone: int  # Ширина пустой зоны (в модулях)
    add_checksum: bool  # Контрольный символ Code 39
    narrow: int  # Узкий элемент ITF/Codabar (в модулях)
    wide: int  # Широкий элемент ITF/Codabar (в модулях)


class BarcodeGenError(Exception):
    """Barcode generation/validation error."""


@dataclass(frozen=True)
class PrintMetrics:
    """Geometry of a single draw call.

    Attributes:
        canvas_size: Exact (width, height) of the raster returned by ``draw``.
        quiet_zone: Blank margin on each side, in modules (linear) or boxes (2D).
        value_length: Length of the value the metrics were computed for.
    """

    canvas_size: Tuple[int, int]
    quiet_zone: int
    value_length: int


class BarcodeGenerator:
    """
    Linear barcode renderer for one symbology.

    Args:
        symbology: Linear BarcodeSymbology.
        options: Optional BarcodeOptions.

    Example:
        >>> gen = BarcodeGenerator(BarcodeSymbology.CODE128)
        >>> metrics = gen.get_print_metrics((200, 200), (200, 200), 8)
        >>> gen.draw("12345670", metrics).size
        (200, 200)
    """

    _pybarcode_support: Dict[BarcodeSymbology, str] = {
        BarcodeSymbology.CODE128: "code128",
        BarcodeSymbology.CODE39: "code39",
        BarcodeSymbology.EAN13: "ean13",
        BarcodeSymbology.EAN8: "ean8",
        BarcodeSymbology.UPCA: "upca",
        BarcodeSymbology.ITF: "itf",
        BarcodeSymbology.CODABAR: "codabar",
    }

    def __init__(
        self,
        symbology: BarcodeSymbology,
        options: Optional[BarcodeOptions] = None,
    ) -> None:
        if not isinstance(symbology, BarcodeSymbology):
            raise TypeError(
                f"symbology must be BarcodeSymbology enum, got {type(symbology)!r}"
            )
        if symbology not in self._pybarcode_support:
            raise BarcodeGenError(f"Barcode type {symbology} is not a linear symbology")
        self.symbology = symbology
        self.options: Dict[str, Any] = dict(options) if options else {}

    def validate(self, data: str) -> None:
        """
        Validate data against the symbology rules.
        Проверяет входные данные и доменные ограничения для символики.

        Raises:
            BarcodeGenError: при ошибке данных.
        """
        if not isinstance(data, str) or not data.strip():
            raise BarcodeGenError("Barcode data must be non-empty string")

        if self.symbology in _DIGIT_LENGTHS:
            name = self.symbology.name
            if not data.isdigit():
                raise BarcodeGenError(f"{name} barcode requires digits only.")
            if len(data) not in _DIGIT_LENGTHS[self.symbology]:
                short, full = _DIGIT_LENGTHS[self.symbology]
                raise BarcodeGenError(f"{name} must be {short} or {full} digits.")

        elif self.symbology == BarcodeSymbology.CODE128:
            if len(data) > 80:
                raise BarcodeGenError("CODE128 data too long (max ~80)")
            if any(ord(c) > 127 for c in data):
                raise BarcodeGenError("CODE128 supports only ASCII characters")

        elif self.symbology == BarcodeSymbology.CODE39:
            valid_chars = set("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-.$/+% ")
            if any(c.islower() for c in data):
                raise BarcodeGenError(
                    "CODE39 supports only uppercase A-Z, 0-9, and -.$/+% chars"
                )
            if not all(c in valid_chars for c in data):
                raise BarcodeGenError("CODE39 supports only A-Z, 0-9, and -.$/+% chars")

        elif self.symbology == BarcodeSymbology.ITF and (
            not data.isdigit() or len(data) % 2 != 0
        ):
            raise BarcodeGenError("ITF must be even number of digits.")

        elif self.symbology == BarcodeSymbology.CODABAR:
            body = data[1:-1]
            if (
                len(data) < 2
                or data[0] not in "ABCD"
                or data[-1] not in "ABCD"
                or not all(c in "0123456789-$:/.+" for c in body)
            ):
                raise BarcodeGenError(
                    "Codabar supports only 0-9, -$:/.+, and start/stop chars A-D"
                )

    def get_print_metrics(
        self,
        max_size: Tuple[int, int],
        target_size: Tuple[int, int],
        value_length: int,
    ) -> PrintMetrics:
        """
        Compute the canvas for a draw call.

        The canvas is ``target_size`` clamped to ``max_size``.

        Raises:
            BarcodeGenError: for an empty value or a canvas outside 1..MAX_CANVAS_SIDE.
        """
        if value_length <= 0:
            raise BarcodeGenError("Barcode data must be non-empty string")
        width = min(target_size[0], max_size[0])
        height = min(target_size[1], max_size[1])
        if width <= 0 or height <= 0:
            raise BarcodeGenError(f"Canvas must be positive, got {width}x{height}")
        if width > MAX_CANVAS_SIDE or height > MAX_CANVAS_SIDE:
            raise BarcodeGenError(
                f"Canvas {width}x{height} exceeds maximum {MAX_CANVAS_SIDE}px"
            )
        quiet_zone = int(self.options.get("quiet_zone", DEFAULT_QUIET_ZONE))
        logger.debug(
            "Print metrics for [%s]: canvas=%dx%d quiet=%d len=%d",
            self.symbology,
            width,
            height,
            quiet_zone,
            value_length,
        )
        return PrintMetrics((width, height), quiet_zone, value_length)

    def encode_modules(self, data: str) -> List[Tuple[bool, int]]:
        """
        Encode data into runs of (is_bar, width_in_modules).

        The pattern comes from ``build()`` of the python-barcode class; no
        writer is involved, so text and quiet zone are left to ``draw``.

        Raises:
            BarcodeGenError: if the data is invalid for the symbology.
        """
        self.validate(data)
        barcode_name = self._pybarcode_support[self.symbology]
        kwargs = {k: v for k, v in self.options.items() if k != "quiet_zone"}
        try:
            bclass = pybarcode.get_barcode_class(barcode_name)
            pattern = bclass(data, writer=None, **kwargs).build()[0]
        except BarcodeNotFoundError as e:
            raise BarcodeGenError(
                f"Barcode class not found for type: {self.symbology}"
            ) from e
        except (BarcodeError, TypeError, ValueError, RuntimeError) as e:
            raise BarcodeGenError(
                f"Barcode encoding failed: {self.symbology} data={data!r}"
            ) from e
        return _pattern_runs(pattern)

    def draw(self, data: str, metrics: PrintMetrics) -> Image.Image:
        """
        Render the barcode to an RGB image of exactly ``metrics.canvas_size``.

        Bars are painted at an integer number of pixels per module, then the
        strip is scaled to the canvas.
        """
        runs = self.encode_modules(data)
        quiet = metrics.quiet_zone
        total_modules = sum(width for _, width in runs) + 2 * quiet
        canvas_width, canvas_height = metrics.canvas_size
        module_px = max(1, canvas_width // total_modules)

        logger.debug(
            "Rendering [%s] data=%s modules=%d module_px=%d",
            self.symbology,
            data,
            total_modules,
            module_px,
        )

        with Image.new("RGB", (total_modules * module_px, canvas_height), "white") as strip:
            draw = ImageDraw.Draw(strip)
            x = quiet * module_px
            for is_bar, width in runs:
                run_px = width * module_px
                if is_bar:
                    draw.rectangle((x, 0, x + run_px - 1, canvas_height - 1), fill="black")
                x += run_px
            # Сжатие усредняет модули, растяжение сохраняет резкие края
            resample = (
                Image.Resampling.NEAREST
                if strip.width <= canvas_width
                else Image.Resampling.BOX
            )
            return strip.resize(metrics.canvas_size, resample=resample)

    @classmethod
    def supported_types(cls) -> Set[BarcodeSymbology]:
        return set(cls._pybarcode_support.keys())

    @classmethod
    def barcode_name_map(cls) -> Dict[BarcodeSymbology, str]:
        return dict(cls._pybarcode_support)


def _pattern_runs(pattern: str) -> List[Tuple[bool, int]]:
    # "1" - бар, "0" - пробел, "G" - удлинённый бар EAN (здесь обычный бар)
    return [
        (char != "0", len(list(group)))
        for char, group in groupby(pattern.replace("G", "1"))
    ]
