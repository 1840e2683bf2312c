"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

STATUS_PENDING = "pending"
STATUS_DONE = "done"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"

TERMINAL_STATUSES = {STATUS_DONE, STATUS_SKIPPED, STATUS_FAILED}


@dataclass(frozen=True, slots=True)
class GeometryResult:
    """水印目标尺寸与在底图上的像素偏移。"""

    target_width: int
    target_height: int
    offset_x: int
    offset_y: int

    @property
    def size(self) -> tuple[int, int]:
        return self.target_width, self.target_height

    @property
    def offset(self) -> tuple[int, int]:
        return self.offset_x, self.offset_y


@dataclass(slots=True)
class BatchItem:
    """记录单个文件的处理状态。"""

    input_path: Path
    output_path: Optional[Path] = None
    status: str = STATUS_PENDING
    error_message: Optional[str] = None

    def mark(self, status: str, message: Optional[str] = None) -> None:
        """将条目推进到终态，终态之后不可再修改。"""

        if self.status in TERMINAL_STATUSES:
            raise ValueError(f"条目已处于终态: {self.input_path} ({self.status})")
        self.status = status
        self.error_message = message


@dataclass(slots=True)
class BatchResult:
    """批处理的最终产出。"""

    succeeded: list[BatchItem] = field(default_factory=list)
    skipped: list[BatchItem] = field(default_factory=list)
    failed: list[BatchItem] = field(default_factory=list)

    def record(self, item: BatchItem) -> None:
        if item.status == STATUS_DONE:
            self.succeeded.append(item)
        elif item.status == STATUS_SKIPPED:
            self.skipped.append(item)
        elif item.status == STATUS_FAILED:
            self.failed.append(item)
        else:
            raise ValueError(f"条目尚未完成: {item.input_path}")
