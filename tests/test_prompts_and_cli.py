"""交互式参数收集与命令行入口测试。"""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Iterable

import pytest
from PIL import Image
from typer.testing import CliRunner

from image_watermark.cli.main import app
from image_watermark.cli.prompts import (
    collect_job_config,
    parse_anchor,
    parse_conflict_policy,
    parse_font_size,
    parse_opacity,
    parse_output_format,
    parse_scale,
    parse_yes_no,
)
from image_watermark.core.config import Anchor, ConflictPolicy, ImageWatermark, TextWatermark
from image_watermark.core.exceptions import InitializationError, InvalidConfigurationError


def scripted(answers: Iterable[str]):
    queue = list(answers)
    questions: list[str] = []

    def ask(question: str) -> str:
        questions.append(question)
        return queue.pop(0)

    ask.questions = questions  # type: ignore[attr-defined]
    return ask


def _make_source(tmp_path: Path) -> Path:
    path = tmp_path / "photo.png"
    Image.new("RGB", (120, 90), "navy").save(path)
    return path


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("abc", 0.7), ("", 0.7), ("0", 0.7), ("1.5", 0.7), ("nan", 0.7), ("1", 1.0), (" 0.25 ", 0.25)],
)
def test_parse_scale(raw: str, expected: float) -> None:
    assert parse_scale(raw) == expected


@pytest.mark.parametrize(("raw", "expected"), [("", 0.5), ("-0.1", 0.5), ("x", 0.5), ("0", 0.0), ("1", 1.0)])
def test_parse_opacity(raw: str, expected: float) -> None:
    assert parse_opacity(raw) == expected


def test_simple_parsers() -> None:
    assert parse_anchor("TOP-LEFT") is Anchor.TOP_LEFT
    assert parse_anchor("middle") is Anchor.CENTER
    assert parse_output_format("") is None
    assert parse_output_format("PNG") == "png"
    assert parse_output_format("bmp") is None
    assert parse_conflict_policy("o") is ConflictPolicy.OVERWRITE_ALL
    assert parse_conflict_policy("S") is ConflictPolicy.SKIP_ALL
    assert parse_conflict_policy("") is ConflictPolicy.ASK_EACH_TIME
    assert parse_conflict_policy("x") is ConflictPolicy.ASK_EACH_TIME
    assert parse_font_size("36") == 36
    assert parse_font_size("-3") == 48
    assert parse_font_size("big") == 48
    assert parse_yes_no("Y") is True
    assert parse_yes_no("") is False


def test_collect_text_config_with_defaults_and_reprompts(tmp_path: Path) -> None:
    source = _make_source(tmp_path)
    ask = scripted(
        [
            "",  # 空路径需要重新输入
            str(source),
            "video",  # 无效类型需要重新输入
            "text",
            "abc",
            "",
            "bottom-right",
            "",
            "",
            "s",
            "",  # 空文字需要重新输入
            "© Studio",
            "",
            "",
            "",
            "y",
            "n",
        ]
    )

    job = collect_job_config(ask, error_log_path=tmp_path / "error.log")

    assert list(job.sources) == [source.resolve()]
    assert job.render.scale == 0.7
    assert job.render.opacity == 0.5
    assert job.render.anchor is Anchor.BOTTOM_RIGHT
    assert job.output.output_dir is None
    assert job.output.output_format is None
    assert job.output.conflict_policy is ConflictPolicy.SKIP_ALL
    assert job.watermark == TextWatermark(text="© Studio", font_family="Arial", font_size=48, bold=True)
    assert len(ask.questions) == 17

    with pytest.raises(dataclasses.FrozenInstanceError):
        job.render = None  # type: ignore[misc]


def test_collect_image_config_creates_output_dir(tmp_path: Path) -> None:
    source = _make_source(tmp_path)
    mark = tmp_path / "logo.png"
    Image.new("RGBA", (30, 10), (255, 255, 255, 200)).save(mark)
    out_dir = tmp_path / "out" / "nested"

    job = collect_job_config(
        scripted([str(source), "image", "0.3", "0.8", "top-left", "jpeg", str(out_dir), "o", str(mark)]),
    )

    assert out_dir.is_dir()
    assert job.output.output_dir == out_dir.resolve()
    assert job.output.output_format == "jpeg"
    assert job.output.conflict_policy is ConflictPolicy.OVERWRITE_ALL
    assert isinstance(job.watermark, ImageWatermark)
    assert job.watermark.source == mark.read_bytes()


def test_collect_fails_without_resolvable_files(tmp_path: Path) -> None:
    with pytest.raises(InitializationError):
        collect_job_config(scripted([str(tmp_path / "missing.png")]))


def test_collect_fails_for_missing_watermark_image(tmp_path: Path) -> None:
    source = _make_source(tmp_path)
    answers = [str(source), "image", "", "", "", "", "", "", str(tmp_path / "nope.png")]

    with pytest.raises(InitializationError):
        collect_job_config(scripted(answers))


def test_collect_rejects_unparseable_color(tmp_path: Path) -> None:
    source = _make_source(tmp_path)
    answers = [str(source), "text", "", "", "", "", "", "", "Hello", "", "", "not-a-color"]

    with pytest.raises(InvalidConfigurationError):
        collect_job_config(scripted(answers))


def test_cli_run_end_to_end(tmp_path: Path) -> None:
    source = _make_source(tmp_path)
    error_log = tmp_path / "error.log"
    answers = [str(source), "text", "0.5", "0.8", "center", "png", "", "a", "Hello", "", "24", "#FF0000", "n", "n"]

    result = CliRunner().invoke(app, ["--error-log", str(error_log)], input="\n".join(answers) + "\n")

    assert result.exit_code == 0, result.output
    output = tmp_path / "photo_watermarked.png"
    assert output.exists()
    with Image.open(output) as img:
        assert img.size == (120, 90)
    assert error_log.read_text(encoding="utf-8") == ""


def test_cli_exits_with_error_when_nothing_to_process(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        app,
        ["--error-log", str(tmp_path / "error.log")],
        input=str(tmp_path / "missing.png") + "\n",
    )

    assert result.exit_code == 1


def test_cli_finishes_normally_when_one_input_is_corrupt(tmp_path: Path) -> None:
    source = _make_source(tmp_path)
    broken = tmp_path / "broken.png"
    broken.write_text("not an image")
    error_log = tmp_path / "error.log"
    answers = [f"{source},{broken}", "text", "", "", "", "", "", "o", "Hello", "", "", "", "", ""]

    result = CliRunner().invoke(app, ["--error-log", str(error_log)], input="\n".join(answers) + "\n")

    assert result.exit_code == 0, result.output
    assert (tmp_path / "photo_watermarked.png").exists()
    lines = error_log.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert lines[0].startswith(f"{broken.resolve()} - ")


def test_cli_exits_cleanly_when_input_is_closed(tmp_path: Path) -> None:
    result = CliRunner().invoke(app, ["--error-log", str(tmp_path / "error.log")], input="")

    assert result.exit_code == 1
    assert not isinstance(result.exception, EOFError)
