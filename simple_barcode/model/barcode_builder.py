# RU: Fluent-конструктор изображения штрихкода с подписью: настройки по умолчанию, цепочка сеттеров, рендер в Image/bytes/base64.
# EN: Fluent barcode image builder: defaults, chained setters, rendering to an image, encoded bytes or a base64 string.

import base64
import logging
from dataclasses import dataclass, replace
from io import BytesIO
from typing import Any, Mapping, Optional, Tuple, Union

from PIL import Image

from simple_barcode.barcodegen.caption import PROBE_FONT_SIZE, text_to_image
from simple_barcode.barcodegen.draw_factory import get_symbology

from .enums import (
    DEFAULT_CAPTION_FONT_FAMILY,
    DEFAULT_HEIGHT,
    DEFAULT_IMAGE_FORMAT,
    DEFAULT_SYMBOLOGY,
    DEFAULT_WIDTH,
    BarcodeSymbology,
    ImageFormat,
)

logger = logging.getLogger(__name__)

# Полоса подписи занимает пятую часть высоты (целочисленное деление)
CAPTION_HEIGHT_DIVISOR = 5


@dataclass(frozen=True)
class BuildConfiguration:
    """
    Immutable snapshot of everything a render call needs.

    ``caption`` None means "no caption band"; ``symbology`` is validated by the
    draw factory at render time.
    """

    value: str
    caption: Optional[str]
    caption_font_family: str = DEFAULT_CAPTION_FONT_FAMILY
    size: Tuple[int, int] = (DEFAULT_WIDTH, DEFAULT_HEIGHT)
    symbology: Union[BarcodeSymbology, str] = DEFAULT_SYMBOLOGY
    character_spacing: bool = True
    probe_font_size: int = PROBE_FONT_SIZE
    max_spacing_iterations: Optional[int] = None
    image_format: Union[ImageFormat, str] = DEFAULT_IMAGE_FORMAT

    @property
    def width(self) -> int:
        return self.size[0]

    @property
    def height(self) -> int:
        return self.size[1]


class BarcodeBuilder:
    """
    Barcode image builder with chained setters.

    Every setter replaces the immutable BuildConfiguration snapshot and returns
    the same builder. Render calls read one snapshot and produce a fresh image.

    Examples:
        img = (
            BarcodeBuilder.new("12345670")
            .caption("1234-5670")
            .size(300, 120)
            .type(BarcodeSymbology.CODE39)
            .generate_image()
        )
        data_uri = "data:image/png;base64," + BarcodeBuilder.new("ABC").generate_image_string(ImageFormat.PNG)
    """

    def __init__(self, configuration: BuildConfiguration) -> None:
        self._configuration = configuration

    @classmethod
    def new(cls, value: str, config: Optional[Mapping[str, Any]] = None) -> "BarcodeBuilder":
        """
        Start a builder for ``value`` with default settings.

        Defaults: caption = value, font "Courier New", Code 128, 200x100,
        character spacing on. ``config`` (see ``simple_barcode.load_config``)
        overrides font family, size, symbology, spacing and search limits.

        Raises:
            ValueError: if value is None or empty.
            TypeError: if value is not a string.
        """
        if value is None:
            raise ValueError("A barcode value is required")
        if not isinstance(value, str):
            raise TypeError(f"Barcode value must be a string, got {type(value).__name__}")
        if not value:
            raise ValueError("A barcode value is required")

        builder = cls(BuildConfiguration(value=value, caption=value))
        if config:
            builder = (
                builder.caption_font_family(
                    config.get("caption_font_family", DEFAULT_CAPTION_FONT_FAMILY)
                )
                .size(
                    config.get("width", DEFAULT_WIDTH),
                    config.get("height", DEFAULT_HEIGHT),
                )
                .type(config.get("symbology", DEFAULT_SYMBOLOGY))
                .character_spacing(bool(config.get("character_spacing", True)))
            )
            builder._configuration = replace(
                builder._configuration,
                probe_font_size=int(config.get("probe_font_size") or PROBE_FONT_SIZE),
                max_spacing_iterations=config.get("max_spacing_iterations"),
                image_format=config.get("image_format", DEFAULT_IMAGE_FORMAT),
            )
        return builder

    @property
    def configuration(self) -> BuildConfiguration:
        return self._configuration

    def caption(self, caption: Optional[str]) -> "BarcodeBuilder":
        """Set the caption text; None renders the barcode alone."""
        self._configuration = replace(self._configuration, caption=caption)
        return self

    def caption_font_family(self, family: str) -> "BarcodeBuilder":
        if family is None:
            raise ValueError("A caption font family is required")
        self._configuration = replace(self._configuration, caption_font_family=family)
        return self

    def size(
        self, width: Union[int, Tuple[int, int]], height: Optional[int] = None
    ) -> "BarcodeBuilder":
        """Set the output size as ``size(width, height)`` or ``size((width, height))``."""
        if height is None:
            if not isinstance(width, tuple) or len(width) != 2:
                raise ValueError(f"Invalid size: {width!r}")
            width, height = width
        if not all(
            isinstance(x, int) and not isinstance(x, bool) and x > 0 for x in (width, height)
        ):
            raise ValueError(f"Invalid size: {width!r}x{height!r}")
        self._configuration = replace(self._configuration, size=(width, height))
        return self

    def type(self, symbology: Union[BarcodeSymbology, str]) -> "BarcodeBuilder":
        self._configuration = replace(self._configuration, symbology=symbology)
        return self

    def character_spacing(self, spacing: bool) -> "BarcodeBuilder":
        self._configuration = replace(self._configuration, character_spacing=spacing)
        return self

    def generate_image_string(
        self, image_format: Optional[Union[ImageFormat, str]] = None
    ) -> str:
        """Base64 of :meth:`generate_byte_array` (ASCII, no line breaks)."""
        return base64.b64encode(self.generate_byte_array(image_format)).decode("ascii")

    def generate_byte_array(
        self, image_format: Optional[Union[ImageFormat, str]] = None
    ) -> bytes:
        """
        Render and encode with Pillow's codec for ``image_format``.

        None uses the configured format (PNG unless overridden by config).
        Unknown formats fail inside Pillow and propagate unchanged.
        """
        if image_format is None:
            image_format = self._configuration.image_format
        fmt = image_format.value if isinstance(image_format, ImageFormat) else image_format
        buf = BytesIO()
        with self.generate_image() as image:
            image.save(buf, format=fmt)
        logger.debug("Output rendered as %s (%d bytes)", fmt, buf.tell())
        return buf.getvalue()

    def generate_image(self) -> Image.Image:
        """
        Render the barcode (and caption band, if any) into a new RGB image.

        The image is always exactly the configured size. The barcode is drawn on
        a square canvas of the larger side and scaled into its region; with a
        caption the bottom ``height // 5`` rows hold the caption band.

        Raises:
            BarcodeGenError, Matrix2DCodeGenError: from the symbology renderer.
        """
        cfg = self._configuration
        width, height = cfg.size
        # Рендерер не попадает точно в размер - рисуем с запасом и масштабируем
        side = max(width, height)
        renderer = get_symbology(cfg.symbology)
        metrics = renderer.get_print_metrics((side, side), (side, side), len(cfg.value))
        text_height = height // CAPTION_HEIGHT_DIVISOR

        with renderer.draw(cfg.value, metrics) as barcode:
            if cfg.caption is None or text_height == 0:
                if cfg.caption is not None:
                    logger.debug("Image height %d leaves no room for a caption", height)
                result = barcode.resize((width, height), resample=Image.Resampling.BOX)
            else:
                result = Image.new("RGB", (width, height), "white")
                try:
                    with barcode.resize(
                        (width, height - text_height), resample=Image.Resampling.BOX
                    ) as scaled:
                        result.paste(scaled, (0, 0))
                    # Добавляем полосу с текстом под штрихкодом
                    with text_to_image(
                        cfg.caption,
                        width,
                        text_height,
                        cfg.caption_font_family,
                        cfg.character_spacing,
                        probe_size=cfg.probe_font_size,
                        max_spacing_iterations=cfg.max_spacing_iterations,
                    ) as text:
                        result.paste(text, (0, height - text_height))
                except BaseException:
                    result.close()
                    raise

        logger.info(
            "Barcode generated: %s, %dx%d, caption=%r",
            cfg.symbology,
            width,
            height,
            cfg.caption,
        )
        return result

    def __str__(self) -> str:
        cfg = self._configuration
        datashow: str = cfg.value[:16] + ("..." if len(cfg.value) > 16 else "")
        return f"BarcodeBuilder({cfg.symbology}, data={datashow}, size={cfg.width}x{cfg.height})"
