"""水印目标尺寸与锚点偏移计算。"""

from __future__ import annotations

import math
from typing import Optional, Tuple, Union

from image_watermark.core.config import Anchor
from image_watermark.core.models import GeometryResult

Size = Tuple[int, int]

# 无法获知水印原始尺寸时使用的高宽比
FALLBACK_HEIGHT_RATIO = 0.5


def resolve_geometry(
    base_size: Size,
    watermark_size: Optional[Size],
    scale: float,
    anchor: Union[Anchor, str],
) -> GeometryResult:
    """根据底图尺寸、缩放比例与锚点计算水印的目标尺寸和偏移。

    目标宽度为 ``floor(底图宽 * scale)``，高度按水印原始宽高比推导。
    若结果在任一方向超出底图，则等比缩小至恰好放入底图，保证偏移非负。
    """

    base_w, base_h = base_size
    target_w = max(1, math.floor(base_w * scale))
    target_h = _aspect_height(target_w, watermark_size)
    target_w, target_h = _fit_within(target_w, target_h, base_w, base_h)

    offset_x, offset_y = _anchor_offset(Anchor.parse(anchor), base_w, base_h, target_w, target_h)
    return GeometryResult(
        target_width=target_w,
        target_height=target_h,
        offset_x=offset_x,
        offset_y=offset_y,
    )


def _aspect_height(target_w: int, watermark_size: Optional[Size]) -> int:
    if watermark_size and watermark_size[0] > 0 and watermark_size[1] > 0:
        source_w, source_h = watermark_size
        return max(1, math.floor(source_h * target_w / source_w))
    return max(1, math.floor(target_w * FALLBACK_HEIGHT_RATIO))


def _fit_within(target_w: int, target_h: int, base_w: int, base_h: int) -> Size:
    """超出底图时等比缩小，使用整数运算避免浮点误差。"""

    if target_w <= base_w and target_h <= base_h:
        return target_w, target_h

    if target_w * base_h >= target_h * base_w:
        return base_w, max(1, target_h * base_w // target_w)
    return max(1, target_w * base_h // target_h), base_h


def _anchor_offset(anchor: Anchor, base_w: int, base_h: int, target_w: int, target_h: int) -> Size:
    if anchor is Anchor.TOP_LEFT:
        return 0, 0
    if anchor is Anchor.TOP_RIGHT:
        return base_w - target_w, 0
    if anchor is Anchor.BOTTOM_LEFT:
        return 0, base_h - target_h
    if anchor is Anchor.BOTTOM_RIGHT:
        return base_w - target_w, base_h - target_h
    return (base_w - target_w) // 2, (base_h - target_h) // 2
