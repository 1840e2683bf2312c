"""进度更新的数据模型。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from image_watermark.core.models import BatchItem


@dataclass(slots=True)
class ProgressUpdate:
    """批处理过程中的进度信息，每个条目进入终态时发出一次。"""

    total: int
    completed: int
    item: Optional[BatchItem] = None
