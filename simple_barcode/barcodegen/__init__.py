"""
barcodegen

Рендеринг штрихкодов и подписей для BarcodeBuilder.

- Линейные штрихкоды (Code 128, Code 39, EAN-13, EAN-8, UPC-A, ITF, Codabar) и QR.
- Единый контракт рендерера: get_print_metrics(...) -> PrintMetrics, draw(value, metrics) -> Image.
- Автоподбор шрифта подписи и растяжение пробелами.

Public API:
    - get_symbology: фабрика рендереров по символике (function)
    - BarcodeGenerator: рендерер линейных штрихкодов (class)
    - BarcodeGenError: исключение для ошибок генерации 1D штрихкодов
    - Matrix2DCodeGenerator: рендерер QR (class)
    - Matrix2DCodeGenError: исключение для ошибок генерации 2D штрихкодов
    - PrintMetrics: геометрия одного вызова draw (dataclass)
    - text_to_image: полоса подписи заданного размера (function)

Примеры:
    >>> from simple_barcode.barcodegen import get_symbology, text_to_image
    >>> from simple_barcode.model.enums import BarcodeSymbology
    >>> renderer = get_symbology(BarcodeSymbology.CODE128)
    >>> img = renderer.draw("12345670", renderer.get_print_metrics((200, 200), (200, 200), 8))
    >>> band = text_to_image("12345670", 200, 20, "Courier New", add_character_spacing=True)

Зависимости:
    Pillow, python-barcode, qrcode
"""

from simple_barcode.barcodegen.barcode_generator import (
    BarcodeGenerator,
    BarcodeGenError,
    BarcodeOptions,
    PrintMetrics,
)
from simple_barcode.barcodegen.caption import text_to_image
from simple_barcode.barcodegen.draw_factory import SymbologyRenderer, get_symbology
from simple_barcode.barcodegen.matrix2d_generator import (
    Matrix2DCodeGenerator,
    Matrix2DCodeGenError,
)

__all__ = [
    "BarcodeGenerator",
    "BarcodeGenError",
    "BarcodeOptions",
    "PrintMetrics",
    "Matrix2DCodeGenerator",
    "Matrix2DCodeGenError",
    "SymbologyRenderer",
    "get_symbology",
    "text_to_image",
]
