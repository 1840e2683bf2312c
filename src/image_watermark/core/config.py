"""处理任务的配置模型。"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence, Union


class Anchor(str, Enum):
    """水印锚点位置。"""

    CENTER = "center"
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Anchor":
        """解析锚点名称，无法识别时回退到 center。"""

        normalized = (value or "").strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return cls.CENTER


class ConflictPolicy(str, Enum):
    """目标文件已存在时的批次级处理策略。"""

    OVERWRITE_ALL = "overwrite"
    SKIP_ALL = "skip"
    ASK_EACH_TIME = "ask"

    @classmethod
    def from_choice(cls, choice: Optional[str]) -> "ConflictPolicy":
        """将 o / s / a 选项映射为策略，默认逐个询问。"""

        normalized = (choice or "").strip().lower()
        if normalized == "o":
            return cls.OVERWRITE_ALL
        if normalized == "s":
            return cls.SKIP_ALL
        return cls.ASK_EACH_TIME


@dataclass(frozen=True, slots=True)
class TextWatermark:
    """文字水印配置。"""

    text: str
    font_family: str = "Arial"
    font_size: int = 48
    color: str = "#FFFFFF"
    bold: bool = False
    italic: bool = False


@dataclass(frozen=True, slots=True)
class ImageWatermark:
    """图片水印配置，source 为原始文件字节。"""

    source: bytes
    source_path: Optional[Path] = None


WatermarkSpec = Union[TextWatermark, ImageWatermark]


@dataclass(frozen=True, slots=True)
class RenderOptions:
    """整个批次共享的缩放、透明度与位置参数。"""

    scale: float = 0.7
    opacity: float = 0.5
    anchor: Anchor = Anchor.CENTER


@dataclass(frozen=True, slots=True)
class OutputConfig:
    """输出目录、格式与冲突策略配置。"""

    output_dir: Optional[Path] = None  # None 表示与源文件同目录
    output_format: Optional[str] = None  # None 表示保留源文件格式
    conflict_policy: ConflictPolicy = ConflictPolicy.ASK_EACH_TIME


@dataclass(frozen=True, slots=True)
class JobConfig:
    """单次批处理任务的配置集合。"""

    sources: Sequence[Path]
    watermark: WatermarkSpec
    render: RenderOptions = field(default_factory=RenderOptions)
    output: OutputConfig = field(default_factory=OutputConfig)
    error_log_path: Path = Path("error.log")
