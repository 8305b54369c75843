"""
RU: Генерация 2D-штрихкода (QR) в растр заданного размера
EN: 2D barcode renderer (QR) sharing the linear renderer's print-metrics/draw contract

Requirements: Pillow, qrcode
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Final, Optional, Set, Tuple

import qrcode
import qrcode.image.pil
from PIL import Image
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q

from simple_barcode.barcodegen.barcode_generator import MAX_CANVAS_SIDE, PrintMetrics
from simple_barcode.model.enums import BarcodeSymbology

logger = logging.getLogger(__name__)

__all__ = [
    "Matrix2DCodeGenerator",
    "Matrix2DCodeGenError",
]

# Пустая зона QR по стандарту - 4 модуля
DEFAULT_QR_BORDER: Final[int] = 4

_ERROR_CORRECTION: Final[Dict[str, int]] = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


class Matrix2DCodeGenError(Exception):
    """2D barcode generation error (Ошибка генерации 2D-штрихкода)."""


class Matrix2DCodeGenerator:
    """2D-code renderer.

    Args:
        symbology: 2D BarcodeSymbology (QR).
        options: Rendering options: ``version``, ``error_correction`` ("L"/"M"/"Q"/"H"),
            ``border`` (quiet zone in modules).

    Examples:
        >>> gen = Matrix2DCodeGenerator(BarcodeSymbology.QR)
        >>> metrics = gen.get_print_metrics((120, 120), (120, 120), 7)
        >>> gen.draw("test123", metrics).size
        (120, 120)
    """

    _qr_types: Set[BarcodeSymbology] = {BarcodeSymbology.QR}

    def __init__(
        self,
        symbology: BarcodeSymbology,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not isinstance(symbology, BarcodeSymbology):
            logger.error("symbology must be BarcodeSymbology, got %r", type(symbology))
            raise TypeError("symbology must be BarcodeSymbology")
        if symbology not in self._qr_types:
            logger.error("Barcode type %r not supported", symbology)
            raise Matrix2DCodeGenError(
                f"Barcode type {symbology!r} not supported for 2D generation"
            )
        self.symbology = symbology
        self.options = options or {}

    def validate(self, data: str) -> None:
        """Validate data for this generator instance.

        Raises:
            Matrix2DCodeGenError: For empty data or an unknown error correction level.
        """
        if not isinstance(data, str) or not data.strip():
            logger.error("Input data is empty or not string, got %r", data)
            raise Matrix2DCodeGenError("Data must be a non-empty string")
        level = self.options.get("error_correction", "M")
        if level not in _ERROR_CORRECTION:
            raise Matrix2DCodeGenError(f"Invalid QR error correction level: {level!r}")

    def get_print_metrics(
        self,
        max_size: Tuple[int, int],
        target_size: Tuple[int, int],
        value_length: int,
    ) -> PrintMetrics:
        """Compute the canvas for a draw call (``target_size`` clamped to ``max_size``)."""
        if value_length <= 0:
            raise Matrix2DCodeGenError("Data must be a non-empty string")
        width = min(target_size[0], max_size[0])
        height = min(target_size[1], max_size[1])
        if width <= 0 or height <= 0:
            raise Matrix2DCodeGenError(f"Canvas must be positive, got {width}x{height}")
        if width > MAX_CANVAS_SIDE or height > MAX_CANVAS_SIDE:
            raise Matrix2DCodeGenError(
                f"Canvas {width}x{height} exceeds maximum {MAX_CANVAS_SIDE}px"
            )
        border = int(self.options.get("border", DEFAULT_QR_BORDER))
        return PrintMetrics((width, height), border, value_length)

    def draw(self, data: str, metrics: PrintMetrics) -> Image.Image:
        """
        Render the QR code to an RGB image of exactly ``metrics.canvas_size``.

        Raises:
            Matrix2DCodeGenError: on invalid data or a qrcode failure.
        """
        self.validate(data)
        qr = qrcode.QRCode(
            version=self.options.get("version"),
            error_correction=_ERROR_CORRECTION[self.options.get("error_correction", "M")],
            box_size=1,
            border=metrics.quiet_zone,
        )
        try:
            qr.add_data(data)
            qr.make(fit=True)
        except Exception as e:
            logger.error("QR generation error: %r", e)
            raise Matrix2DCodeGenError(f"QR generation failed: {e}") from e

        # Целое число пикселей на модуль, затем точная подгонка под холст
        side = qr.modules_count + 2 * metrics.quiet_zone
        qr.box_size = max(1, min(metrics.canvas_size) // side)
        qr_img = qr.make_image(
            fill_color="black",
            back_color="white",
            image_factory=qrcode.image.pil.PilImage,
        )
        if hasattr(qr_img, "get_image"):
            qr_img = qr_img.get_image()
        if not isinstance(qr_img, Image.Image):
            logger.error("QR code did not produce a PIL.Image")
            raise Matrix2DCodeGenError("QR code rendering did not produce a valid image")

        with qr_img.convert("RGB") as rgb:
            logger.debug(
                "QR rendered: version=%s modules=%d box=%d", qr.version, side, qr.box_size
            )
            return rgb.resize(metrics.canvas_size, resample=Image.Resampling.NEAREST)

    @classmethod
    def all_supported_types(cls) -> Set[BarcodeSymbology]:
        """Get all supported 2D barcode types."""
        return set(cls._qr_types)
