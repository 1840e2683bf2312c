"""单个文件的处理单元：加载、计算几何、合成与写入。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image

from image_watermark.core.config import RenderOptions
from image_watermark.core.exceptions import CompositeError
from image_watermark.core.models import STATUS_DONE, STATUS_FAILED, BatchItem
from image_watermark.core.output_manager import OutputManager
from image_watermark.processing.compositor import composite_watermark
from image_watermark.processing.geometry import resolve_geometry
from image_watermark.processing.image_loader import load_image
from image_watermark.processing.renderer import RenderedWatermark


@dataclass(slots=True)
class ProcessingTask:
    """描述单个图片处理任务。"""

    item: BatchItem
    destination: Path
    rendered: RenderedWatermark
    options: RenderOptions


def run_task(task: ProcessingTask, output_manager: OutputManager) -> BatchItem:
    """执行完整的单文件处理流程，并将条目推进到 done 或 failed。"""

    item = task.item
    item.output_path = task.destination
    image: Optional[Image.Image] = None
    composed: Optional[Image.Image] = None

    try:
        image = load_image(item.input_path)
        geometry = resolve_geometry(image.size, task.rendered.size, task.options.scale, task.options.anchor)
        composed = composite_watermark(image, task.rendered, task.options, geometry)
        output_manager.save_image(composed, task.destination)
    except CompositeError as exc:
        item.mark(STATUS_FAILED, str(exc))
    else:
        item.mark(STATUS_DONE)
    finally:
        _close_if_needed(image, composed)

    return item


def _close_if_needed(*images: Optional[Image.Image]) -> None:
    for img in images:
        if img is not None:
            img.close()
