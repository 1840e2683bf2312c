"""输出路径、格式决策与冲突处理模块。"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from PIL import Image

from image_watermark.core.config import ConflictPolicy, OutputConfig
from image_watermark.core.exceptions import CompositeError, DirectoryCreationError

LOGGER = logging.getLogger(__name__)

SUPPORTED_FORMATS = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
}

OUTPUT_SUFFIX = "_watermarked"

ConfirmOverwrite = Callable[[Path], bool]


class ImageWriteError(CompositeError):
    """输出写入失败。"""


@dataclass(slots=True)
class DestinationDecision:
    """封装输出文件决策。"""

    destination: Path
    action: str  # write | overwrite | skip
    note: Optional[str] = None


def normalize_format(value: Optional[str]) -> Optional[str]:
    """返回受支持的格式名（保留 jpeg 原样），否则返回 None。"""

    normalized = (value or "").strip().lower().lstrip(".")
    if normalized in SUPPORTED_FORMATS:
        return normalized
    return None


def resolve_output_format(source: Path, requested: Optional[str]) -> str:
    """用户指定了格式时统一使用，否则沿用源文件扩展名（jpeg 归一为 jpg）。"""

    explicit = normalize_format(requested)
    if explicit:
        return explicit

    extension = source.suffix.lower().lstrip(".")
    return "jpg" if extension == "jpeg" else extension


def build_output_path(source: Path, output_dir: Optional[Path], output_format: str) -> Path:
    """生成 <目录>/<原文件名>_watermarked.<格式> 形式的输出路径。"""

    directory = output_dir if output_dir is not None else source.parent
    return directory / f"{source.stem}{OUTPUT_SUFFIX}.{output_format}"


def prepare_output_dir(raw: str) -> Optional[Path]:
    """解析输出目录，不存在时递归创建；空字符串表示沿用源文件目录。"""

    if not raw.strip():
        return None

    directory = Path(raw.strip()).expanduser().resolve()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreationError(f"无法创建输出目录 {directory}: {exc}") from exc
    if not directory.is_dir():
        raise DirectoryCreationError(f"输出路径不是目录: {directory}")
    return directory


class OutputManager:
    """负责输出路径、冲突策略与图像写入。"""

    def __init__(self, config: OutputConfig, confirm_overwrite: Optional[ConfirmOverwrite] = None) -> None:
        self.config = config
        self.confirm_overwrite = confirm_overwrite

    def destination_for(self, source: Path) -> Path:
        output_format = resolve_output_format(source, self.config.output_format)
        return build_output_path(source, self.config.output_dir, output_format)

    def decide_destination(self, source: Path) -> DestinationDecision:
        """根据冲突策略确定是否写入目标路径。"""

        destination = self.destination_for(source)
        if not destination.exists():
            return DestinationDecision(destination=destination, action="write")

        policy = self.config.conflict_policy
        existing_msg = f"目标已存在: {destination.name}"

        if policy is ConflictPolicy.OVERWRITE_ALL:
            return DestinationDecision(destination=destination, action="overwrite", note=existing_msg)
        if policy is ConflictPolicy.SKIP_ALL:
            return DestinationDecision(destination=destination, action="skip", note=existing_msg)

        confirmed = bool(self.confirm_overwrite and self.confirm_overwrite(destination))
        action = "overwrite" if confirmed else "skip"
        return DestinationDecision(destination=destination, action=action, note=existing_msg)

    def save_image(self, image: Image.Image, destination: Path) -> None:
        """按目标扩展名编码并写入磁盘（JPEG 质量 95，PNG 无损）。"""

        image_format = SUPPORTED_FORMATS.get(destination.suffix.lower().lstrip("."))
        if not image_format:
            raise ImageWriteError(f"不支持的输出格式: {destination.suffix}")

        save_params: dict[str, object] = {}
        image_to_save = image
        if image_format == "JPEG":
            save_params.update(quality=95)
            if image.mode != "RGB":
                image_to_save = image.convert("RGB")
        elif image.mode not in {"RGB", "RGBA"}:
            image_to_save = image.convert("RGBA")

        try:
            image_to_save.save(destination, format=image_format, **save_params)
        except OSError as exc:
            raise ImageWriteError(f"写入文件失败: {destination}: {exc}") from exc
        LOGGER.debug("已写入 %s (%s)", destination, image_format)
