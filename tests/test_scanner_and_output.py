"""输入路径解析、输出路径决策与错误日志测试。"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from PIL import Image

from image_watermark.core.config import ConflictPolicy, OutputConfig
from image_watermark.core.error_log import ErrorLog
from image_watermark.core.exceptions import DirectoryCreationError, InvalidConfigurationError
from image_watermark.core.models import STATUS_DONE, BatchItem
from image_watermark.core.output_manager import (
    OutputManager,
    build_output_path,
    prepare_output_dir,
    resolve_output_format,
)
from image_watermark.core.scanner import resolve_input_paths, split_path_tokens
from image_watermark.utils.colors import parse_color


def test_split_path_tokens_trims_and_drops_empty() -> None:
    assert split_path_tokens(" a.png , ,b.jpg,") == ["a.png", "b.jpg"]


def test_resolve_input_paths_expands_dedups_and_warns(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    source = tmp_path / "input"
    nested = source / "nested"
    nested.mkdir(parents=True)

    Image.new("RGB", (8, 8), "blue").save(source / "b.jpg")
    Image.new("RGB", (8, 8), "red").save(source / "a.png")
    Image.new("RGB", (8, 8), "red").save(nested / "deep.png")
    (source / "notes.txt").write_text("hello")

    tokens = [str(source / "a.png"), str(source), str(tmp_path / "missing.png"), str(source / "notes.txt")]
    with caplog.at_level(logging.WARNING):
        resolved = resolve_input_paths(tokens)

    # 目录不递归；显式文件在前，重复项只保留一次
    assert resolved == [(source / "a.png").resolve(), (source / "b.jpg").resolve()]
    assert all(path.is_absolute() for path in resolved)
    messages = " ".join(record.getMessage() for record in caplog.records)
    assert "missing.png" in messages
    assert "notes.txt" in messages


def test_resolve_output_format() -> None:
    assert resolve_output_format(Path("/x/photo.png"), None) == "png"
    assert resolve_output_format(Path("/x/photo.JPEG"), None) == "jpg"
    assert resolve_output_format(Path("/x/photo.png"), "jpg") == "jpg"
    assert resolve_output_format(Path("/x/photo.png"), "jpeg") == "jpeg"
    assert resolve_output_format(Path("/x/photo.jpg"), "gif") == "jpg"


def test_build_output_path_defaults_to_source_directory(tmp_path: Path) -> None:
    source = tmp_path / "holiday.photo.jpg"

    assert build_output_path(source, None, "png") == tmp_path / "holiday.photo_watermarked.png"
    assert build_output_path(source, tmp_path / "out", "jpg") == tmp_path / "out" / "holiday.photo_watermarked.jpg"


def test_prepare_output_dir(tmp_path: Path) -> None:
    assert prepare_output_dir("   ") is None

    created = prepare_output_dir(str(tmp_path / "a" / "b"))
    assert created == (tmp_path / "a" / "b").resolve()
    assert created.is_dir()

    blocker = tmp_path / "file.txt"
    blocker.write_text("x")
    with pytest.raises(DirectoryCreationError):
        prepare_output_dir(str(blocker))


def test_ask_policy_consults_confirmation(tmp_path: Path) -> None:
    source = tmp_path / "pic.png"
    existing = tmp_path / "pic_watermarked.png"
    existing.write_bytes(b"old")
    asked: list[Path] = []

    def confirm(path: Path) -> bool:
        asked.append(path)
        return True

    config = OutputConfig(conflict_policy=ConflictPolicy.ASK_EACH_TIME)
    assert OutputManager(config, confirm_overwrite=confirm).decide_destination(source).action == "overwrite"
    assert OutputManager(config, confirm_overwrite=lambda _: False).decide_destination(source).action == "skip"
    assert OutputManager(config).decide_destination(source).action == "skip"
    assert asked == [existing]


def test_fixed_policies_do_not_prompt(tmp_path: Path) -> None:
    source = tmp_path / "pic.png"
    (tmp_path / "pic_watermarked.png").write_bytes(b"old")

    def confirm(path: Path) -> bool:
        raise AssertionError("should not prompt")

    overwrite = OutputManager(OutputConfig(conflict_policy=ConflictPolicy.OVERWRITE_ALL), confirm)
    skip = OutputManager(OutputConfig(conflict_policy=ConflictPolicy.SKIP_ALL), confirm)

    assert overwrite.decide_destination(source).action == "overwrite"
    assert skip.decide_destination(source).action == "skip"
    assert skip.decide_destination(tmp_path / "fresh.png").action == "write"


def test_error_log_reset_and_record(tmp_path: Path) -> None:
    log_path = tmp_path / "error.log"
    log_path.write_text("stale\n", encoding="utf-8")

    error_log = ErrorLog(log_path)
    error_log.reset()
    error_log.record(tmp_path / "a.png", "无法加载图像")
    error_log.record(tmp_path / "b.png", "line one\nline two")

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert lines == [f"{tmp_path / 'a.png'} - 无法加载图像", f"{tmp_path / 'b.png'} - line one line two"]


def test_batch_item_terminal_state_is_final(tmp_path: Path) -> None:
    item = BatchItem(input_path=tmp_path / "a.png")
    item.mark(STATUS_DONE)

    with pytest.raises(ValueError):
        item.mark(STATUS_DONE)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("#FFFFFF", (255, 255, 255, 255)),
        ("fff", (255, 255, 255, 255)),
        ("#00000080", (0, 0, 0, 128)),
        ("rgba(255, 0, 0, 0.5)", (255, 0, 0, 128)),
        ("rgb(1,2,3)", (1, 2, 3, 255)),
        ("red", (255, 0, 0, 255)),
    ],
)
def test_parse_color(value: str, expected: tuple[int, int, int, int]) -> None:
    assert parse_color(value) == expected


@pytest.mark.parametrize("value", ["", "#12", "rgba(300,0,0,1)", "rgba(0,0,0,2)", "nope"])
def test_parse_color_rejects_invalid(value: str) -> None:
    with pytest.raises(InvalidConfigurationError):
        parse_color(value)
