"""
model/enums.py

(Краткое RU: Перечисления символик штрихкодов и форматов изображений.)

EN: Domain enums for the barcode builder (symbology tags understood by the draw
factory and the container formats understood by Pillow's codecs).
NO rendering logic here!

See Also:
    - simple_barcode.barcodegen (symbology renderers)
"""

from __future__ import annotations

from enum import Enum
from typing import Final, Literal


class BarcodeSymbology(str, Enum):
    CODE128 = "code128"
    CODE39 = "code39"
    EAN13 = "ean13"
    EAN8 = "ean8"
    UPCA = "upca"
    ITF = "itf"  # Interleaved 2 of 5
    CODABAR = "codabar"
    QR = "qr"

    @property
    def is_linear(self) -> bool:
        return self is not BarcodeSymbology.QR

    def localized_name(self, lang: Literal["ru", "en"] = "ru") -> str:
        names_ru = {
            BarcodeSymbology.CODE128: "Code 128",
            BarcodeSymbology.CODE39: "Code 39",
            BarcodeSymbology.EAN13: "EAN-13",
            BarcodeSymbology.EAN8: "EAN-8",
            BarcodeSymbology.UPCA: "UPC-A",
            BarcodeSymbology.ITF: "Чередующийся 2 из 5",
            BarcodeSymbology.CODABAR: "Codabar",
            BarcodeSymbology.QR: "QR-код",
        }
        names_en = {
            BarcodeSymbology.CODE128: "Code 128",
            BarcodeSymbology.CODE39: "Code 39",
            BarcodeSymbology.EAN13: "EAN-13",
            BarcodeSymbology.EAN8: "EAN-8",
            BarcodeSymbology.UPCA: "UPC-A",
            BarcodeSymbology.ITF: "Interleaved 2 of 5",
            BarcodeSymbology.CODABAR: "Codabar",
            BarcodeSymbology.QR: "QR Code",
        }
        return (names_ru if lang == "ru" else names_en)[self]


class ImageFormat(str, Enum):
    """
    Форматы контейнеров для сериализации изображения.

    Значения совпадают с именами форматов Pillow и передаются
    в Image.save(format=...) без преобразования.
    """

    PNG = "PNG"
    BMP = "BMP"
    JPEG = "JPEG"
    GIF = "GIF"
    TIFF = "TIFF"

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self]

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]


_MIME_TYPES = {
    ImageFormat.PNG: "image/png",
    ImageFormat.BMP: "image/bmp",
    ImageFormat.JPEG: "image/jpeg",
    ImageFormat.GIF: "image/gif",
    ImageFormat.TIFF: "image/tiff",
}

_EXTENSIONS = {
    ImageFormat.PNG: ".png",
    ImageFormat.BMP: ".bmp",
    ImageFormat.JPEG: ".jpg",
    ImageFormat.GIF: ".gif",
    ImageFormat.TIFF: ".tiff",
}


# === DEFAULTS ===
DEFAULT_SYMBOLOGY: Final[BarcodeSymbology] = BarcodeSymbology.CODE128
DEFAULT_IMAGE_FORMAT: Final[ImageFormat] = ImageFormat.PNG
DEFAULT_CAPTION_FONT_FAMILY: Final[str] = "Courier New"
DEFAULT_WIDTH: Final[int] = 200
DEFAULT_HEIGHT: Final[int] = 100


__all__ = [
    "BarcodeSymbology",
    "ImageFormat",
    "DEFAULT_SYMBOLOGY",
    "DEFAULT_IMAGE_FORMAT",
    "DEFAULT_CAPTION_FONT_FAMILY",
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT",
]
