"""字体查找：按字体族名称与粗体/斜体样式定位 TrueType 字体。"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Union

from PIL import ImageFont

LOGGER = logging.getLogger(__name__)

FALLBACK_FAMILIES = ("DejaVuSans", "DejaVu Sans", "LiberationSans-Regular")

# Windows 字体文件的样式短后缀，例如 arialbd.ttf
_SHORT_SUFFIX = {"Bold": "bd", "Italic": "i", "Bold Italic": "bi"}

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


@dataclass(frozen=True)
class FontChoice:
    """查找结果；synthetic_* 为 True 表示需要渲染时模拟该样式。"""

    font: Font
    synthetic_bold: bool
    synthetic_italic: bool


def _style_name(bold: bool, italic: bool) -> str:
    if bold and italic:
        return "Bold Italic"
    if bold:
        return "Bold"
    if italic:
        return "Italic"
    return ""


def _candidates(family: str, style: str) -> list[str]:
    compact = family.replace(" ", "")
    if not style:
        return [f"{family}.ttf", f"{compact}.ttf", f"{compact.lower()}.ttf", f"{compact}-Regular.ttf"]
    dashed = style.replace(" ", "")
    return [
        f"{family} {style}.ttf",
        f"{compact}-{dashed}.ttf",
        f"{compact.lower()}{_SHORT_SUFFIX[style]}.ttf",
    ]


def _try_truetype(names: list[str], size: int) -> Union[ImageFont.FreeTypeFont, None]:
    for name in names:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return None


@lru_cache(maxsize=32)
def resolve_font(family: str, size: int, bold: bool = False, italic: bool = False) -> FontChoice:
    """返回最匹配的字体。

    先尝试带样式的字体文件，再尝试常规字体（由调用方模拟样式），
    最后回退到 DejaVuSans 与 Pillow 内置字体。
    """

    family = family.strip() or "Arial"
    style = _style_name(bold, italic)

    if style:
        styled = _try_truetype(_candidates(family, style), size)
        if styled is not None:
            return FontChoice(styled, synthetic_bold=False, synthetic_italic=False)

    regular = _try_truetype(_candidates(family, ""), size)
    if regular is None:
        LOGGER.debug("找不到字体 %s，使用回退字体", family)
        regular = _try_truetype([f"{name}.ttf" for name in FALLBACK_FAMILIES], size)
    if regular is None:
        return FontChoice(ImageFont.load_default(size=size), synthetic_bold=bold, synthetic_italic=italic)
    return FontChoice(regular, synthetic_bold=bold, synthetic_italic=italic)
