"""颜色工具函数。"""

from __future__ import annotations

import re
from typing import Tuple

from PIL import ImageColor

from image_watermark.core.exceptions import InvalidConfigurationError

HEX_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
FUNC_COLOR_RE = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([0-9]*\.?[0-9]+)\s*)?\)$",
    re.IGNORECASE,
)

RGBA = Tuple[int, int, int, int]


def parse_color(value: str) -> RGBA:
    """将颜色字符串解析为 RGBA 四元组。

    支持 ``#RGB``、``#RGBA``、``#RRGGBB``、``#RRGGBBAA``、``rgb(r,g,b)``、
    ``rgba(r,g,b,a)``（a 为 0~1 的小数）以及 Pillow 可识别的颜色名称。
    """

    if not value or not value.strip():
        raise InvalidConfigurationError("颜色值不能为空")

    text = value.strip()

    match = HEX_COLOR_RE.match(text)
    if match:
        hex_value = match.group(1)
        if len(hex_value) in (3, 4):
            hex_value = "".join(ch * 2 for ch in hex_value)
        if len(hex_value) == 6:
            hex_value += "ff"
        return (
            int(hex_value[0:2], 16),
            int(hex_value[2:4], 16),
            int(hex_value[4:6], 16),
            int(hex_value[6:8], 16),
        )

    match = FUNC_COLOR_RE.match(text)
    if match:
        r, g, b = (int(match.group(i)) for i in (1, 2, 3))
        if max(r, g, b) > 255:
            raise InvalidConfigurationError(f"颜色分量超出范围: {value}")
        alpha = float(match.group(4)) if match.group(4) is not None else 1.0
        if alpha > 1.0:
            raise InvalidConfigurationError(f"透明度分量超出范围: {value}")
        return r, g, b, round(alpha * 255)

    try:
        rgb = ImageColor.getrgb(text)
    except ValueError as exc:
        raise InvalidConfigurationError(f"无法解析颜色值: {value}") from exc
    if len(rgb) == 3:
        return (*rgb, 255)
    return rgb
