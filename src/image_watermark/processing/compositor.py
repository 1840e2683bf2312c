"""合成模块：缩放水印、调整透明度并叠加到底图上。"""

from __future__ import annotations

import numpy as np
from PIL import Image

from image_watermark.core.config import RenderOptions
from image_watermark.core.exceptions import CompositeError
from image_watermark.core.models import GeometryResult
from image_watermark.processing.renderer import RenderedWatermark


def apply_opacity(watermark: Image.Image, opacity: float) -> Image.Image:
    """将 alpha 通道整体乘以 opacity（等价于与 alpha=opacity 的纯色图层做 dest-in 混合），颜色通道不变。"""

    array = np.array(watermark.convert("RGBA"), dtype=np.float32)
    array[..., 3] *= opacity
    np.clip(np.rint(array), 0, 255, out=array)
    return Image.fromarray(array.astype(np.uint8))


def prepare_overlay(rendered: RenderedWatermark, options: RenderOptions, geometry: GeometryResult) -> Image.Image:
    """缩放到目标尺寸；图片水印在缩放后再应用透明度。"""

    overlay = rendered.image.resize(geometry.size, Image.LANCZOS)
    if not rendered.opacity_baked and options.opacity < 1.0:
        overlay = apply_opacity(overlay, options.opacity)
    return overlay


def composite_watermark(
    base: Image.Image,
    rendered: RenderedWatermark,
    options: RenderOptions,
    geometry: GeometryResult,
) -> Image.Image:
    """返回叠加水印后的新 RGBA 图像，原图不变。"""

    try:
        overlay = prepare_overlay(rendered, options, geometry)
        result = base.convert("RGBA")
        result.alpha_composite(overlay, dest=geometry.offset)
    except (OSError, ValueError) as exc:
        raise CompositeError(f"合成失败: {exc}") from exc
    return result
