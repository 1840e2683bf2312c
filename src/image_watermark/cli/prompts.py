"""交互式配置收集：按固定顺序提问，生成一个不可变的 JobConfig。

提问方式通过 ``ask(question) -> str`` 注入，便于在没有终端的情况下测试。
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Callable, Optional

from image_watermark.core.config import (
    Anchor,
    ConflictPolicy,
    ImageWatermark,
    JobConfig,
    OutputConfig,
    RenderOptions,
    TextWatermark,
    WatermarkSpec,
)
from image_watermark.core.exceptions import InitializationError
from image_watermark.core.output_manager import normalize_format, prepare_output_dir
from image_watermark.core.scanner import is_supported_image, resolve_input_paths, split_path_tokens
from image_watermark.utils.colors import parse_color

LOGGER = logging.getLogger(__name__)

AskFn = Callable[[str], str]

DEFAULT_SCALE = 0.7
DEFAULT_OPACITY = 0.5
DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_FONT_SIZE = 48
DEFAULT_COLOR = "#FFFFFF"
WATERMARK_TYPES = ("text", "image")


def _parse_float(raw: str) -> Optional[float]:
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if math.isnan(value):
        return None
    return value


def parse_scale(raw: str) -> float:
    """取值 (0, 1]，非法或为空时返回 0.7。"""

    value = _parse_float(raw)
    if value is None or value <= 0 or value > 1:
        return DEFAULT_SCALE
    return value


def parse_opacity(raw: str) -> float:
    """取值 [0, 1]，非法或为空时返回 0.5。"""

    value = _parse_float(raw)
    if value is None or value < 0 or value > 1:
        return DEFAULT_OPACITY
    return value


def parse_anchor(raw: str) -> Anchor:
    return Anchor.parse(raw)


def parse_output_format(raw: str) -> Optional[str]:
    """返回 jpg / jpeg / png；为空或无法识别时返回 None（沿用源文件格式）。"""

    return normalize_format(raw)


def parse_conflict_policy(raw: str) -> ConflictPolicy:
    return ConflictPolicy.from_choice(raw)


def parse_font_size(raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError:
        return DEFAULT_FONT_SIZE
    return value if value > 0 else DEFAULT_FONT_SIZE


def parse_yes_no(raw: str) -> bool:
    return raw.strip().lower() == "y"


def _ask(ask: AskFn, question: str) -> str:
    return ask(question).strip()


def _ask_required(ask: AskFn, question: str, retry_question: str) -> str:
    answer = _ask(ask, question)
    while not answer:
        answer = _ask(ask, retry_question)
    return answer


def collect_job_config(ask: AskFn, error_log_path: Path = Path("error.log")) -> JobConfig:
    """按顺序收集全部参数。

    没有可处理的文件、输出目录无法创建或水印图片无效时抛出 InitializationError。
    """

    raw_paths = _ask_required(
        ask,
        "请输入要添加水印的图片文件或目录路径（多个用逗号分隔）: ",
        "必须输入路径，请重新输入: ",
    )
    sources = resolve_input_paths(split_path_tokens(raw_paths))
    if not sources:
        raise InitializationError("没有可处理的图片，程序结束。")
    LOGGER.info("共解析到 %d 个待处理文件", len(sources))

    kind = _ask(ask, "请选择水印类型 (text/image) [text]: ").lower() or "text"
    while kind not in WATERMARK_TYPES:
        kind = _ask(ask, "输入无效，请输入 text 或 image: ").lower()

    render = RenderOptions(
        scale=parse_scale(_ask(ask, "请输入水印宽度占原图宽度的比例 (0~1，默认 0.7): ")),
        opacity=parse_opacity(_ask(ask, "请输入水印不透明度 (0~1，默认 0.5): ")),
        anchor=parse_anchor(
            _ask(ask, "请选择水印位置 (center, top-left, top-right, bottom-left, bottom-right) [center]: ")
        ),
    )

    output_format = parse_output_format(_ask(ask, "请选择输出格式 (jpg/png) [与原图相同]: "))
    output_dir = prepare_output_dir(_ask(ask, "请输入输出目录（直接回车表示与原图相同目录）: "))
    policy = parse_conflict_policy(
        _ask(ask, "目标文件已存在时如何处理？(o: 全部覆盖, s: 全部跳过, a: 逐个询问) [a]: ")
    )

    if kind == "text":
        watermark: WatermarkSpec = _collect_text_watermark(ask)
    else:
        watermark = _collect_image_watermark(ask)

    return JobConfig(
        sources=tuple(sources),
        watermark=watermark,
        render=render,
        output=OutputConfig(output_dir=output_dir, output_format=output_format, conflict_policy=policy),
        error_log_path=error_log_path,
    )


def _collect_text_watermark(ask: AskFn) -> TextWatermark:
    text = _ask_required(ask, "请输入水印文字: ", "水印文字不能为空，请重新输入: ")
    font_family = _ask(ask, f"请输入字体 [{DEFAULT_FONT_FAMILY}]: ") or DEFAULT_FONT_FAMILY
    font_size = parse_font_size(_ask(ask, f"请输入字号 [{DEFAULT_FONT_SIZE}]: "))
    color = _ask(ask, f"请输入文字颜色 (如 #FFFFFF 或 rgba(255,255,255,0.5)) [{DEFAULT_COLOR}]: ") or DEFAULT_COLOR
    # 提前校验，颜色无法解析时在开始处理前终止
    parse_color(color)
    bold = parse_yes_no(_ask(ask, "是否加粗？(y/n) [n]: "))
    italic = parse_yes_no(_ask(ask, "是否倾斜？(y/n) [n]: "))
    return TextWatermark(
        text=text,
        font_family=font_family,
        font_size=font_size,
        color=color,
        bold=bold,
        italic=italic,
    )


def _collect_image_watermark(ask: AskFn) -> ImageWatermark:
    raw = _ask_required(ask, "请输入水印图片路径: ", "必须输入路径，请重新输入: ")
    path = Path(raw).expanduser().resolve()
    if not path.is_file() or not is_supported_image(path):
        raise InitializationError(f"水印图片不存在或格式不受支持: {path}")
    try:
        source = path.read_bytes()
    except OSError as exc:
        raise InitializationError(f"无法读取水印图片 {path}: {exc}") from exc
    return ImageWatermark(source=source, source_path=path)
