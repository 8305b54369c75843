"""
RU: Фабрика рендереров: символика -> генератор с контрактом get_print_metrics/draw.
EN: Draw factory mapping a symbology tag to its renderer.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol, Tuple, Union

from PIL import Image

from simple_barcode.barcodegen.barcode_generator import (
    BarcodeGenerator,
    BarcodeGenError,
    PrintMetrics,
)
from simple_barcode.barcodegen.matrix2d_generator import Matrix2DCodeGenerator
from simple_barcode.model.enums import BarcodeSymbology

logger = logging.getLogger(__name__)

__all__ = ["SymbologyRenderer", "get_symbology"]


class SymbologyRenderer(Protocol):
    """Contract shared by the linear and 2D generators."""

    def get_print_metrics(
        self,
        max_size: Tuple[int, int],
        target_size: Tuple[int, int],
        value_length: int,
    ) -> PrintMetrics: ...

    def draw(self, data: str, metrics: PrintMetrics) -> Image.Image: ...


def get_symbology(
    symbology: Union[BarcodeSymbology, str],
    options: Optional[Dict[str, Any]] = None,
) -> SymbologyRenderer:
    """
    Return a renderer for the symbology.

    Args:
        symbology: BarcodeSymbology member or its string value (e.g. "code128").
        options: Generator options passed through unchanged.

    Raises:
        BarcodeGenError: for a tag no generator supports.
    """
    try:
        tag = BarcodeSymbology(symbology)
    except ValueError as e:
        logger.error("Unknown symbology %r", symbology)
        raise BarcodeGenError(f"Unsupported barcode symbology: {symbology!r}") from e

    if tag in Matrix2DCodeGenerator.all_supported_types():
        return Matrix2DCodeGenerator(tag, options)
    if tag in BarcodeGenerator.supported_types():
        return BarcodeGenerator(tag, options)  # type: ignore[arg-type]
    raise BarcodeGenError(f"Unsupported barcode symbology: {tag!r}")
