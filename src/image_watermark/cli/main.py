"""命令行入口。"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from image_watermark.cli.prompts import AskFn, collect_job_config
from image_watermark.core.exceptions import InitializationError, InvalidConfigurationError, RenderError
from image_watermark.core.models import STATUS_DONE, STATUS_SKIPPED
from image_watermark.core.output_manager import ConfirmOverwrite
from image_watermark.core.progress import ProgressUpdate
from image_watermark.processing.pipeline import process_batch
from image_watermark.utils.logging import setup_logging

app = typer.Typer(help="批量为 JPG/PNG 图片添加文字或图片水印。")


def _build_ask(console: Console) -> AskFn:
    def ask(question: str) -> str:
        return console.input(escape(question)).strip()

    return ask


def _build_confirm(ask: AskFn) -> ConfirmOverwrite:
    def confirm(destination: Path) -> bool:
        return ask(f"文件 {destination} 已存在，是否覆盖？(y/n) ").lower() == "y"

    return confirm


def _build_progress_callback(console: Console):
    def callback(update: ProgressUpdate) -> None:
        item = update.item
        if item is None:
            return
        prefix = f"[{update.completed}/{update.total}]"
        if item.status == STATUS_DONE and item.output_path is not None:
            console.print(f"{escape(prefix)} [green]已保存[/green] {escape(item.output_path.name)}")
        elif item.status == STATUS_SKIPPED and item.output_path is not None:
            console.print(f"{escape(prefix)} [yellow]已跳过[/yellow] {escape(item.output_path.name)}")
        else:
            console.print(
                f"{escape(prefix)} [red]处理失败[/red] {escape(str(item.input_path))}: "
                f"{escape(item.error_message or '')}"
            )

    return callback


@app.command("run")
def run_cli(
    error_log: Path = typer.Option(Path("error.log"), "--error-log", help="错误日志文件路径"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    """按提示收集参数并执行批量水印处理。"""

    setup_logging(logging.DEBUG if verbose else logging.WARNING)
    console = Console()
    ask = _build_ask(console)

    console.print("欢迎使用图片水印命令行工具，按 Ctrl+C 退出。\n")

    try:
        job = collect_job_config(ask, error_log_path=error_log.expanduser().resolve())
        result = process_batch(
            job,
            confirm_overwrite=_build_confirm(ask),
            progress_callback=_build_progress_callback(console),
        )
    except (InitializationError, InvalidConfigurationError, RenderError) as exc:
        console.print(f"[red]错误：{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc
    except (EOFError, KeyboardInterrupt) as exc:
        console.print("\n[yellow]已取消，程序结束。[/yellow]")
        raise typer.Exit(code=1) from exc

    console.print(
        f"\n全部处理完成：成功 {len(result.succeeded)} 张，跳过 {len(result.skipped)} 张，"
        f"失败 {len(result.failed)} 张。"
    )
    if result.failed:
        console.print(f"错误详情见：{escape(str(job.error_log_path))}")


if __name__ == "__main__":
    app()
