"""处理流水线：渲染一次水印，按顺序逐个处理文件并隔离单文件错误。"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from image_watermark.core.config import JobConfig
from image_watermark.core.error_log import ErrorLog
from image_watermark.core.models import STATUS_FAILED, STATUS_PENDING, STATUS_SKIPPED, BatchItem, BatchResult
from image_watermark.core.output_manager import ConfirmOverwrite, OutputManager
from image_watermark.core.progress import ProgressUpdate
from image_watermark.processing.renderer import RenderedWatermark, render_watermark
from image_watermark.processing.worker import ProcessingTask, run_task

LOGGER = logging.getLogger(__name__)


ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


def process_batch(
    config: JobConfig,
    confirm_overwrite: Optional[ConfirmOverwrite] = None,
    progress_callback: ProgressCallback = None,
) -> BatchResult:
    """批量处理入口。

    水印只渲染一次并在所有文件间共享；渲染失败（RenderError）直接向上抛出。
    单个文件的任何失败都会写入错误日志并继续处理下一个文件。
    """

    rendered = render_watermark(config.watermark, config.render)

    error_log = ErrorLog(config.error_log_path)
    error_log.reset()

    output_manager = OutputManager(config.output, confirm_overwrite=confirm_overwrite)
    items = [BatchItem(input_path=path) for path in config.sources]
    total = len(items)
    result = BatchResult()
    LOGGER.info("开始处理 %d 个文件", total)

    for completed, item in enumerate(items, start=1):
        _process_item(item, rendered, config, output_manager, error_log)
        result.record(item)
        _emit_progress(progress_callback, completed, total, item)

    LOGGER.info(
        "处理完成：成功 %d，跳过 %d，失败 %d",
        len(result.succeeded),
        len(result.skipped),
        len(result.failed),
    )
    return result


def _process_item(
    item: BatchItem,
    rendered: RenderedWatermark,
    config: JobConfig,
    output_manager: OutputManager,
    error_log: ErrorLog,
) -> None:
    try:
        decision = output_manager.decide_destination(item.input_path)
        if decision.action == "skip":
            LOGGER.info("跳过输出（已存在）：%s", decision.destination)
            item.output_path = decision.destination
            item.mark(STATUS_SKIPPED, decision.note)
            return

        task = ProcessingTask(
            item=item,
            destination=decision.destination,
            rendered=rendered,
            options=config.render,
        )
        run_task(task, output_manager)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("处理 %s 时发生异常", item.input_path)
        if item.status == STATUS_PENDING:
            item.mark(STATUS_FAILED, str(exc) or type(exc).__name__)

    if item.status == STATUS_FAILED:
        error_log.record(item.input_path, item.error_message or "")


def _emit_progress(callback: ProgressCallback, completed: int, total: int, item: BatchItem) -> None:
    if not callback:
        return
    callback(ProgressUpdate(total=total, completed=completed, item=item))
