"""输入路径解析与图片筛选逻辑。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator

LOGGER = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png"}


def is_supported_image(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_EXTENSIONS


def split_path_tokens(raw: str) -> list[str]:
    """按逗号拆分用户输入，去除空白与空项。"""

    return [token.strip() for token in raw.split(",") if token.strip()]


def _iter_directory_images(directory: Path) -> Iterator[Path]:
    """列出目录下（不递归）的受支持图片文件。"""

    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name.lower())
    except OSError as exc:
        LOGGER.warning("无法读取目录 %s: %s", directory, exc)
        return

    for candidate in entries:
        if candidate.is_file() and is_supported_image(candidate):
            yield candidate


def resolve_input_paths(tokens: Iterable[str]) -> list[Path]:
    """将路径片段解析为去重后的绝对图片路径列表。

    目录展开为其中的受支持图片；不存在或格式不受支持的片段记录警告后跳过。
    返回顺序与输入顺序一致。
    """

    collected: list[Path] = []
    seen: set[Path] = set()

    for token in tokens:
        resolved = Path(token).expanduser().resolve()
        if not resolved.exists():
            LOGGER.warning("路径不存在: %s", token)
            continue

        if resolved.is_dir():
            candidates: Iterable[Path] = _iter_directory_images(resolved)
        elif is_supported_image(resolved):
            candidates = (resolved,)
        else:
            LOGGER.warning("不支持的文件格式: %s", token)
            continue

        for candidate in candidates:
            if candidate in seen:
                continue
            seen.add(candidate)
            collected.append(candidate)

    return collected
