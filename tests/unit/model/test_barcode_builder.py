"""
Модульные тесты для BarcodeBuilder: значения по умолчанию, цепочка сеттеров,
точный размер результата, сериализация в байты и base64.
"""

import base64
import logging
from io import BytesIO
from pathlib import Path
from typing import Any, List, Tuple
from unittest.mock import patch

import pytest
from PIL import Image

from simple_barcode import load_config
from simple_barcode.barcodegen.barcode_generator import BarcodeGenError
from simple_barcode.model import barcode_builder
from simple_barcode.model.barcode_builder import BarcodeBuilder, BuildConfiguration
from simple_barcode.model.enums import BarcodeSymbology, ImageFormat

SAMPLES = [
    (BarcodeSymbology.CODE128, "12345670"),
    (BarcodeSymbology.CODE39, "ABC-123"),
    (BarcodeSymbology.EAN13, "4006381333931"),
    (BarcodeSymbology.EAN8, "9638507"),
    (BarcodeSymbology.UPCA, "036000291452"),
    (BarcodeSymbology.ITF, "123456"),
    (BarcodeSymbology.CODABAR, "A40156B"),
    (BarcodeSymbology.QR, "https://example.com/item/42"),
]

WHITE = (255, 255, 255)


def is_white(img: Image.Image) -> bool:
    return img.getextrema() == ((255, 255), (255, 255), (255, 255))


@pytest.fixture
def builder() -> BarcodeBuilder:
    return BarcodeBuilder.new("12345670")


@pytest.fixture(autouse=True)
def default_caption_font() -> Any:
    # Не зависим от набора системных шрифтов
    with patch("simple_barcode.barcodegen.caption.resolve_font_source", return_value=None):
        yield


class TestConstruction:
    def test_defaults(self, builder: BarcodeBuilder) -> None:
        cfg = builder.configuration
        assert cfg == BuildConfiguration(value="12345670", caption="12345670")
        assert cfg.caption_font_family == "Courier New"
        assert cfg.size == (200, 100)
        assert cfg.symbology == BarcodeSymbology.CODE128
        assert cfg.character_spacing is True
        assert cfg.max_spacing_iterations is None

    def test_none_value_raises(self) -> None:
        with pytest.raises(ValueError, match="required"):
            BarcodeBuilder.new(None)  # type: ignore[arg-type]

    def test_empty_value_raises(self) -> None:
        with pytest.raises(ValueError, match="required"):
            BarcodeBuilder.new("")

    def test_non_string_value_raises(self) -> None:
        with pytest.raises(TypeError, match="string"):
            BarcodeBuilder.new(12345670)  # type: ignore[arg-type]

    def test_from_config(self) -> None:
        config = {
            "caption_font_family": "Arial",
            "width": 320,
            "height": 60,
            "symbology": "qr",
            "character_spacing": False,
            "probe_font_size": 40,
            "max_spacing_iterations": 5,
        }
        cfg = BarcodeBuilder.new("ABC", config=config).configuration
        assert cfg.caption_font_family == "Arial"
        assert cfg.size == (320, 60)
        assert cfg.symbology == "qr"
        assert cfg.character_spacing is False
        assert cfg.probe_font_size == 40
        assert cfg.max_spacing_iterations == 5
        assert cfg.caption == "ABC"

    def test_from_default_config_file(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "missing.json")
        cfg = BarcodeBuilder.new("ABC", config=config).configuration
        assert cfg == BuildConfiguration(
            value="ABC", caption="ABC", symbology="code128", probe_font_size=50
        )


class TestSetters:
    def test_setters_chain_on_same_builder(self, builder: BarcodeBuilder) -> None:
        result = (
            builder.caption("CAP")
            .caption_font_family("Arial")
            .size(300, 120)
            .type(BarcodeSymbology.CODE39)
            .character_spacing(False)
        )
        assert result is builder
        cfg = builder.configuration
        assert (cfg.caption, cfg.caption_font_family, cfg.size) == ("CAP", "Arial", (300, 120))
        assert cfg.symbology == BarcodeSymbology.CODE39
        assert cfg.character_spacing is False

    def test_configuration_snapshot_is_immutable(self, builder: BarcodeBuilder) -> None:
        before = builder.configuration
        builder.size(10, 10)
        assert before.size == (200, 100)
        with pytest.raises(AttributeError):
            before.size = (1, 1)  # type: ignore[misc]

    def test_caption_none(self, builder: BarcodeBuilder) -> None:
        assert builder.caption(None).configuration.caption is None

    def test_font_family_none_raises(self, builder: BarcodeBuilder) -> None:
        with pytest.raises(ValueError, match="font family"):
            builder.caption_font_family(None)  # type: ignore[arg-type]

    def test_size_tuple(self, builder: BarcodeBuilder) -> None:
        assert builder.size((320, 80)).configuration.size == (320, 80)

    @pytest.mark.parametrize(
        "args",
        [(0, 10), (10, -1), ((5, 0),), ((1, 2, 3),), (5,), (True, 5), (5, True), ((True, 1),)],
    )
    def test_size_invalid(self, builder: BarcodeBuilder, args: Tuple[Any, ...]) -> None:
        with pytest.raises(ValueError, match="Invalid size"):
            builder.size(*args)

    def test_str(self, builder: BarcodeBuilder) -> None:
        assert "12345670" in str(builder)
        assert "200x100" in str(builder)


class TestGenerateImage:
    @pytest.mark.parametrize("symbology,value", SAMPLES)
    @pytest.mark.parametrize("size", [(200, 100), (300, 50), (57, 211), (4, 4), (1, 1)])
    def test_exact_size_with_caption(
        self, symbology: BarcodeSymbology, value: str, size: Tuple[int, int]
    ) -> None:
        img = BarcodeBuilder.new(value).type(symbology).size(*size).generate_image()
        assert img.size == size
        assert img.mode == "RGB"

    @pytest.mark.parametrize("symbology,value", SAMPLES)
    def test_exact_size_without_caption(self, symbology: BarcodeSymbology, value: str) -> None:
        img = BarcodeBuilder.new(value).type(symbology).caption(None).size(123, 77).generate_image()
        assert img.size == (123, 77)

    @pytest.mark.parametrize(
        "caption", ["1", "A much longer caption than the barcode value itself", "Привет"]
    )
    def test_exact_size_any_caption(self, builder: BarcodeBuilder, caption: str) -> None:
        assert builder.caption(caption).size(250, 90).generate_image().size == (250, 90)

    def test_default_scenario(self, builder: BarcodeBuilder) -> None:
        img = builder.generate_image()
        assert img.size == (200, 100)

        bars = img.crop((0, 0, 200, 80))
        row = [bars.getpixel((x, 40)) for x in range(200)]
        assert (0, 0, 0) in row and WHITE in row
        # Штрихи на всю высоту области штрихкода
        assert bars.getpixel((100, 0)) == bars.getpixel((100, 79))

        band = img.crop((0, 80, 200, 100))
        assert band.convert("L").getextrema()[0] < 128
        assert band.getpixel((0, 0)) == WHITE
        assert band.getpixel((199, 19)) == WHITE

    def test_no_caption_scenario(self) -> None:
        img = BarcodeBuilder.new("ABC").caption(None).size(300, 50).generate_image()
        assert img.size == (300, 50)
        bottom = [img.getpixel((x, 49)) for x in range(300)]
        top = [img.getpixel((x, 0)) for x in range(300)]
        assert bottom == top
        assert any(pixel[0] < 128 for pixel in bottom)

    def test_blank_caption_gives_white_band(self, builder: BarcodeBuilder) -> None:
        img = builder.caption("   ").generate_image()
        assert is_white(img.crop((0, 80, 200, 100)))
        assert not is_white(img.crop((0, 0, 200, 80)))

    def test_short_image_skips_caption(self, builder: BarcodeBuilder) -> None:
        with patch.object(barcode_builder, "text_to_image") as render_caption:
            img = builder.size(100, 4).generate_image()
        render_caption.assert_not_called()
        assert img.size == (100, 4)

    def test_caption_band_geometry(self, builder: BarcodeBuilder) -> None:
        with patch.object(
            barcode_builder,
            "text_to_image",
            side_effect=lambda text, w, h, *a, **kw: Image.new("RGB", (w, h), "white"),
        ) as render_caption:
            builder.size(300, 123).character_spacing(False).generate_image()
        args = render_caption.call_args.args
        assert args[:5] == ("12345670", 300, 24, "Courier New", False)

    def test_caption_failure_closes_result(self, builder: BarcodeBuilder) -> None:
        created: List[Image.Image] = []
        real_new = Image.new

        def tracking_new(*args: Any, **kwargs: Any) -> Image.Image:
            img = real_new(*args, **kwargs)
            created.append(img)
            return img

        with patch.object(barcode_builder.Image, "new", side_effect=tracking_new):
            with patch.object(
                barcode_builder, "text_to_image", side_effect=RuntimeError("font engine failure")
            ):
                with pytest.raises(RuntimeError, match="font engine failure"):
                    builder.generate_image()
        results = [img for img in created if img.size == (200, 100)]
        assert len(results) == 1
        # Закрытое изображение больше нельзя читать
        with pytest.raises(ValueError):
            results[0].getpixel((0, 0))

    def test_unknown_symbology_propagates(self, builder: BarcodeBuilder) -> None:
        with pytest.raises(BarcodeGenError, match="Unsupported"):
            builder.type("i2of5").generate_image()

    def test_invalid_value_for_symbology_propagates(self) -> None:
        with pytest.raises(BarcodeGenError):
            BarcodeBuilder.new("lowercase").type(BarcodeSymbology.CODE39).generate_image()

    def test_each_call_returns_new_image(self, builder: BarcodeBuilder) -> None:
        first = builder.generate_image()
        second = builder.generate_image()
        assert first is not second
        assert first.tobytes() == second.tobytes()

    def test_logs_render(
        self, builder: BarcodeBuilder, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="simple_barcode"):
            builder.generate_image()
        assert "Barcode generated" in caplog.text


class TestSerialization:
    @pytest.mark.parametrize("fmt", list(ImageFormat))
    def test_byte_array_round_trip(self, builder: BarcodeBuilder, fmt: ImageFormat) -> None:
        data = builder.size(210, 95).generate_byte_array(fmt)
        with Image.open(BytesIO(data)) as decoded:
            assert decoded.format == fmt.value
            assert decoded.size == (210, 95)

    def test_byte_array_accepts_string_format(self, builder: BarcodeBuilder) -> None:
        assert builder.generate_byte_array("PNG").startswith(b"\x89PNG")

    def test_default_format_is_png(self, builder: BarcodeBuilder) -> None:
        assert builder.generate_byte_array().startswith(b"\x89PNG")

    def test_format_from_config(self) -> None:
        built = BarcodeBuilder.new("ABC", config={"image_format": "BMP"})
        assert built.generate_byte_array().startswith(b"BM")

    def test_unknown_format_propagates(self, builder: BarcodeBuilder) -> None:
        with pytest.raises((KeyError, ValueError)):
            builder.generate_byte_array("NOT-A-FORMAT")

    @pytest.mark.parametrize("fmt", [ImageFormat.PNG, ImageFormat.BMP])
    def test_image_string_is_base64_of_bytes(
        self, builder: BarcodeBuilder, fmt: ImageFormat
    ) -> None:
        encoded = builder.generate_image_string(fmt)
        assert encoded == base64.b64encode(builder.generate_byte_array(fmt)).decode("ascii")
        assert "\n" not in encoded

    def test_image_string_decodes_to_image(self, builder: BarcodeBuilder) -> None:
        raw = base64.b64decode(builder.generate_image_string(ImageFormat.PNG))
        with Image.open(BytesIO(raw)) as decoded:
            assert decoded.size == (200, 100)
