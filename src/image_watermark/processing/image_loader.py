"""底图加载与基础预处理实现。"""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from image_watermark.core.exceptions import CompositeError

LOGGER = logging.getLogger(__name__)


class ImageLoadingError(CompositeError):
    """图片加载失败。"""


def load_image(path: Path) -> Image.Image:
    """加载单张图片，执行 EXIF 旋转并统一转换为 RGBA。

    返回值为新的 Image 对象，调用者负责关闭。
    """

    try:
        with Image.open(path) as img:
            img.load()

            # EXIF Orientation 校正
            img = ImageOps.exif_transpose(img)

            if img.mode != "RGBA":
                img = _convert_to_rgba(img)

            return img.copy()
    except (UnidentifiedImageError, OSError) as exc:
        LOGGER.debug("无法识别图像文件 %s: %s", path, exc)
        raise ImageLoadingError(f"无法加载图像: {path}") from exc


def _convert_to_rgba(img: Image.Image) -> Image.Image:
    """将任意模式图像转换为 RGBA，保留已有的透明信息。"""

    if img.mode in {"CMYK", "YCbCr", "LAB", "HSV"}:
        return img.convert("RGB").convert("RGBA")

    if img.mode.startswith("I"):
        return img.convert("L").convert("RGBA")

    return img.convert("RGBA")
