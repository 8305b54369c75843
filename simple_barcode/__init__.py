"""
Пакет Simple Barcode Generator
==============================

Генератор изображений штрихкодов с подписью для чеков, этикеток и документов.

Этот пакет предоставляет:
    - Fluent-конструктор BarcodeBuilder с настройками по умолчанию
    - Линейные штрихкоды (Code 128, Code 39, EAN-13, EAN-8, UPC-A, ITF, Codabar) и QR
    - Автоподбор размера шрифта подписи под полосу фиксированного размера
    - Растяжение короткой подписи межсимвольными пробелами
    - Вывод в PIL.Image, байты (PNG/BMP/JPEG/GIF/TIFF) или base64-строку

Пример базового использования:
    >>> from simple_barcode import BarcodeBuilder, ImageFormat
    >>>
    >>> img = BarcodeBuilder.new("12345670").generate_image()
    >>> img.size
    (200, 100)
    >>>
    >>> png = (
    ...     BarcodeBuilder.new("ABC")
    ...     .caption(None)
    ...     .size(300, 50)
    ...     .generate_byte_array(ImageFormat.PNG)
    ... )

Управление конфигурацией:
    >>> import os
    >>> os.environ['SIMPLE_BARCODE_LOG_LEVEL'] = 'DEBUG'
    >>>
    >>> from simple_barcode import load_config, BarcodeBuilder
    >>>
    >>> config = load_config()
    >>> builder = BarcodeBuilder.new("4006381333931", config=config)

Версия: 0.1.0
Лицензия: MIT
Python: 3.9+
"""

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# =============================================================================
# МЕТАДАННЫЕ ВЕРСИИ
# =============================================================================

__version__ = "0.1.0"
__author__ = "Simple Barcode Generator Development Team"
__description__ = "Barcode image generator with auto-fitted human-readable captions"
__license__ = "MIT"
__python_requires__ = ">=3.9"

# Компоненты семантической версии
VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

# =============================================================================
# ПРОВЕРКА ВЕРСИИ PYTHON
# =============================================================================

if sys.version_info < (3, 9):
    raise RuntimeError(
        f"Simple Barcode Generator требует Python 3.9 или выше. "
        f"Текущая версия: {sys.version_info.major}."
        f"{sys.version_info.minor}.{sys.version_info.micro}"
    )

# =============================================================================
# КОНФИГУРАЦИЯ ЛОГИРОВАНИЯ
# =============================================================================

_PACKAGE_LOGGER_NAME = "simple_barcode"


def _setup_logging() -> None:
    """
    Инициализировать общепакетную конфигурацию логирования.

    Настраивает логгер пакета с:
    - Консольным обработчиком (stderr) для WARNING и выше
    - Ротирующим файловым обработчиком для всех уровней, если задана
      переменная окружения SIMPLE_BARCODE_LOG_FILE

    Уровень логирования задаётся переменной окружения
    SIMPLE_BARCODE_LOG_LEVEL (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Функция идемпотентна - повторные вызовы не имеют дополнительного эффекта.
    """
    log_level_str = os.environ.get("SIMPLE_BARCODE_LOG_LEVEL", "INFO").upper()

    log_level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    log_level = log_level_map.get(log_level_str, logging.INFO)

    package_logger = logging.getLogger(_PACKAGE_LOGGER_NAME)
    if package_logger.handlers:
        return

    package_logger.setLevel(log_level)

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Консольный обработчик (stderr) - WARNING и выше
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    # Файловый обработчик (ротирующий) - только по запросу
    log_file = os.environ.get("SIMPLE_BARCODE_LOG_FILE")
    if log_file:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_path,
                maxBytes=10 * 1024 * 1024,  # 10 МБ
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            package_logger.addHandler(file_handler)
        except OSError as e:
            package_logger.warning(
                "Не удалось инициализировать файловое логирование: %s. "
                "Используется только консоль.",
                e,
            )


def get_logger(module_name: str) -> logging.Logger:
    """
    Получить логгер в пространстве имён пакета.

    Логгеры именуются как 'simple_barcode.<module_name>' и наследуют
    обработчики логгера пакета.

    Аргументы:
        module_name: Имя модуля, обычно `__name__`.

    Возвращает:
        Экземпляр logging.Logger.

    Пример:
        >>> logger = get_logger("my_plugin")
        >>> logger.name
        'simple_barcode.my_plugin'
    """
    if module_name.startswith(_PACKAGE_LOGGER_NAME):
        return logging.getLogger(module_name)
    if module_name == "__main__":
        return logging.getLogger(f"{_PACKAGE_LOGGER_NAME}.main")
    # Удаляем ведущие точки из относительных импортов
    clean_name = module_name.lstrip(".")
    return logging.getLogger(f"{_PACKAGE_LOGGER_NAME}.{clean_name}")


# =============================================================================
# УПРАВЛЕНИЕ КОНФИГУРАЦИЕЙ
# =============================================================================

_DEFAULT_CONFIG_FILENAME = "simple_barcode.json"

# Значения конфигурации по умолчанию
_DEFAULT_CONFIG: Dict[str, Any] = {
    "caption_font_family": "Courier New",
    "width": 200,
    "height": 100,
    "symbology": "code128",
    "character_spacing": True,
    "probe_font_size": 50,
    "max_spacing_iterations": None,
    "image_format": "PNG",
}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Загрузить конфигурацию из JSON-файла или использовать настройки по умолчанию.

    Ключи конфигурации:
        - caption_font_family: str - Семейство шрифтов подписи
        - width: int - Ширина изображения в пикселях
        - height: int - Высота изображения в пикселях
        - symbology: str - Значение BarcodeSymbology
        - character_spacing: bool - Растягивать подпись пробелами
        - probe_font_size: int - Пробный размер шрифта для измерения подписи
        - max_spacing_iterations: Optional[int] - Предел поиска числа пробелов
          (None - ширина полосы в пикселях)
        - image_format: str - Формат контейнера по умолчанию

    Аргументы:
        config_path: Путь к файлу конфигурации. Если None, используется
            SIMPLE_BARCODE_CONFIG или 'simple_barcode.json' в текущем каталоге.

    Возвращает:
        Словарь со всеми ключами по умолчанию, пользовательские значения
        переопределяют значения по умолчанию.
    """
    logger = get_logger(__name__)

    if config_path is None:
        config_path = Path(os.environ.get("SIMPLE_BARCODE_CONFIG", _DEFAULT_CONFIG_FILENAME))

    config = _DEFAULT_CONFIG.copy()

    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                user_config = json.load(f)

            if not isinstance(user_config, dict):
                raise ValueError(
                    f"Файл конфигурации должен содержать JSON-объект, "
                    f"получен {type(user_config).__name__}"
                )

            config.update(user_config)

            logger.info("Конфигурация загружена из %s", config_path)
            logger.debug("Конфигурация: %s", config)

        except json.JSONDecodeError as e:
            logger.warning(
                "Не удалось разобрать %s: недопустимый JSON в строке %d, столбце %d. "
                "Используется конфигурация по умолчанию.",
                config_path,
                e.lineno,
                e.colno,
            )
        except OSError as e:
            logger.warning(
                "Не удалось прочитать %s: %s. Используется конфигурация по умолчанию.",
                config_path,
                e,
            )
        except ValueError as e:
            logger.warning(
                "Недопустимый формат конфигурации: %s. Используется конфигурация по умолчанию.",
                e,
            )
    else:
        logger.debug(
            "Файл конфигурации %s не найден. Используется конфигурация по умолчанию.",
            config_path,
        )

    return config


def check_dependencies() -> Dict[str, bool]:
    """
    Проверить, установлены ли зависимости рендеринга.

    Не вызывает исключений для отсутствующих пакетов - возвращает
    словарь состояний.

    Проверяемые зависимости:
        - pillow: растровая графика, шрифты и кодеки
        - python-barcode: кодирование линейных символик
        - qrcode: матрица QR-кода

    Возвращает:
        Словарь, отображающий имена пакетов на статус доступности.
    """
    dependencies: Dict[str, bool] = {}

    try:
        import PIL  # noqa: F401

        dependencies["pillow"] = True
    except ImportError:
        dependencies["pillow"] = False

    try:
        import barcode  # noqa: F401

        dependencies["python-barcode"] = True
    except ImportError:
        dependencies["python-barcode"] = False

    try:
        import qrcode  # noqa: F401

        dependencies["qrcode"] = True
    except ImportError:
        dependencies["qrcode"] = False

    return dependencies


_setup_logging()

# =============================================================================
# ПУБЛИЧНЫЙ API
# =============================================================================

# Примечание: импорты размещены после функций утилит, чтобы логирование
# было настроено первым.

from .barcodegen import (  # noqa: E402
    BarcodeGenError,
    BarcodeGenerator,
    Matrix2DCodeGenError,
    Matrix2DCodeGenerator,
    PrintMetrics,
    get_symbology,
    text_to_image,
)
from .model.barcode_builder import BarcodeBuilder, BuildConfiguration  # noqa: E402
from .model.enums import BarcodeSymbology, ImageFormat  # noqa: E402

__all__ = [
    "__version__",
    "BarcodeBuilder",
    "BuildConfiguration",
    "BarcodeSymbology",
    "ImageFormat",
    "BarcodeGenerator",
    "BarcodeGenError",
    "Matrix2DCodeGenerator",
    "Matrix2DCodeGenError",
    "PrintMetrics",
    "get_symbology",
    "text_to_image",
    "get_logger",
    "load_config",
    "check_dependencies",
]
