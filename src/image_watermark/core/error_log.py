"""批处理错误日志（error.log）写入工具。"""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER = logging.getLogger(__name__)


class ErrorLog:
    """追加式错误日志，每次批处理开始时清空。

    每条失败记录一行：``<输入路径> - <错误信息>``。日志写入失败只记录警告，
    不会中断批处理。
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def reset(self) -> None:
        try:
            self.path.write_text("", encoding="utf-8")
        except OSError as exc:
            LOGGER.warning("无法清空错误日志 %s: %s", self.path, exc)

    def record(self, input_path: Path, message: str) -> None:
        line = f"{input_path} - {' '.join(message.splitlines())}\n"
        try:
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(line)
        except OSError as exc:
            LOGGER.warning("无法写入错误日志 %s: %s", self.path, exc)
