"""水印渲染：文字栅格化或加载图片水印，输出原始分辨率的 RGBA 图像。"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from io import BytesIO

from PIL import Image, ImageDraw, UnidentifiedImageError

from image_watermark.core.config import ImageWatermark, RenderOptions, TextWatermark, WatermarkSpec
from image_watermark.core.exceptions import InvalidConfigurationError, RenderError
from image_watermark.utils.colors import parse_color
from image_watermark.utils.fonts import resolve_font

LOGGER = logging.getLogger(__name__)

MIN_TEXT_CANVAS_WIDTH = 500
TEXT_WIDTH_FACTOR = 0.8
ITALIC_SHEAR = 0.2
CANVAS_MARGIN = 2


@dataclass(frozen=True)
class RenderedWatermark:
    """渲染结果。

    文字水印的透明度在栅格化时已写入字形填充色（opacity_baked=True）；
    图片水印的透明度留待缩放之后由合成阶段单独处理。
    """

    image: Image.Image
    opacity_baked: bool

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


def render_watermark(spec: WatermarkSpec, options: RenderOptions) -> RenderedWatermark:
    """为整个批次渲染一次水印。"""

    if isinstance(spec, TextWatermark):
        return RenderedWatermark(render_text_watermark(spec, options.opacity), opacity_baked=True)
    if isinstance(spec, ImageWatermark):
        return RenderedWatermark(load_image_watermark(spec), opacity_baked=False)
    raise RenderError(f"未知的水印类型: {type(spec).__name__}")


def text_canvas_size(text: str, font_size: int) -> tuple[int, int]:
    """文字画布的最小尺寸：宽 max(500, 字数 * 字号 * 0.8)，高为字号两倍。"""

    width = int(max(MIN_TEXT_CANVAS_WIDTH, len(text) * font_size * TEXT_WIDTH_FACTOR))
    return width, font_size * 2


def render_text_watermark(spec: TextWatermark, opacity: float) -> Image.Image:
    """将文字居中绘制到透明画布上，透明度直接写入填充色。"""

    try:
        r, g, b, a = parse_color(spec.color)
    except InvalidConfigurationError as exc:
        raise RenderError(str(exc)) from exc

    fill = (r, g, b, round(a * opacity))
    choice = resolve_font(spec.font_family, spec.font_size, spec.bold, spec.italic)
    stroke_width = max(1, round(spec.font_size / 32)) if choice.synthetic_bold else 0

    measure = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
    left, top, right, bottom = measure.textbbox((0, 0), spec.text, font=choice.font, stroke_width=stroke_width)
    text_w = right - left
    text_h = bottom - top
    if text_w <= 0 or text_h <= 0:
        raise RenderError(f"无法计算文字尺寸: {spec.text!r}")

    # 估算尺寸只是下限，实际字形更宽时按测量结果扩展画布
    min_w, min_h = text_canvas_size(spec.text, spec.font_size)
    height = max(min_h, text_h + 2 * CANVAS_MARGIN)
    margin_x = CANVAS_MARGIN + (math.ceil(ITALIC_SHEAR * height / 2) if choice.synthetic_italic else 0)
    width = max(min_w, text_w + 2 * margin_x)

    canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(canvas)

    x = (width - text_w) / 2 - left
    y = (height - text_h) / 2 - top
    draw.text(
        (x, y),
        spec.text,
        font=choice.font,
        fill=fill,
        stroke_width=stroke_width,
        stroke_fill=fill,
    )

    if choice.synthetic_italic:
        canvas = canvas.transform(
            canvas.size,
            Image.Transform.AFFINE,
            (1, ITALIC_SHEAR, -ITALIC_SHEAR * height / 2, 0, 1, 0),
            resample=Image.BICUBIC,
        )

    LOGGER.debug("文字水印渲染完成: %sx%s", width, height)
    return canvas


def load_image_watermark(spec: ImageWatermark) -> Image.Image:
    """解码图片水印并统一为 RGBA。"""

    try:
        with Image.open(BytesIO(spec.source)) as img:
            img.load()
            return img.convert("RGBA")
    except (UnidentifiedImageError, OSError) as exc:
        label = spec.source_path or "<bytes>"
        LOGGER.debug("无法解码水印图片 %s: %s", label, exc)
        raise RenderError(f"无法解码水印图片: {label}") from exc
