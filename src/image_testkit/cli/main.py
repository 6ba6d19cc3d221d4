"""命令行入口。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from image_testkit.core.config import GeneratorConfig, JobConfig, load_config
from image_testkit.core.exceptions import ImageTestkitError
from image_testkit.core.filters import Filters
from image_testkit.core.progress import ProgressUpdate
from image_testkit.core.version import TOOL_VERSION
from image_testkit.processing.pipeline import generate_images
from image_testkit.utils.logging import setup_logging

app = typer.Typer(help="批量生成不同比例、尺寸、格式与质量的测试图片。")
console = Console()


def _split_values(values: Optional[List[str]]) -> list[str]:
    """支持重复传参与逗号分隔两种写法。"""

    result: list[str] = []
    for value in values or []:
        result.extend(value.split(","))
    return result


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id
        if update.total == 0:
            return
        if task_id is None:
            task_id = progress.add_task("生成图片", total=update.total)
        progress.update(task_id, completed=update.completed + update.failed)

    return callback


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"image-testkit {TOOL_VERSION}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="显示版本号并退出"
    ),
) -> None:
    """image-testkit 命令行工具。"""


@app.command("generate")
def generate_cli(
    output: Path = typer.Option(Path("./test-images"), "--output", "-o", help="输出目录"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="自定义配置文件 (JSON)"),
    ratios: Optional[List[str]] = typer.Option(None, "--ratios", help="比例分类，例如 platform,common,edge"),
    sizes: Optional[List[str]] = typer.Option(None, "--sizes", help="尺寸分类，例如 tiny,small,medium"),
    formats: Optional[List[str]] = typer.Option(None, "--formats", help="输出格式，例如 jpeg,png,webp"),
    max_workers: int = typer.Option(10, "--workers", "-w", help="并发线程数量"),
    clean: bool = typer.Option(False, "--clean", help="生成前清空输出目录"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    """按配置生成测试图片并写出 manifest.json。"""

    setup_logging(logging.DEBUG if verbose else logging.WARNING)

    try:
        config = load_config(config_file.expanduser().resolve() if config_file else None)
    except ImageTestkitError as exc:
        typer.secho(f"加载配置失败：{exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    filters = Filters.from_lists(_split_values(ratios), _split_values(sizes), _split_values(formats))
    job = JobConfig(
        output_dir=output.expanduser().resolve(),
        filters=filters,
        max_workers=max_workers,
        clean=clean,
    )

    typer.echo(f"配置版本：{config.version}")
    typer.echo(f"筛选条件：{filters.summary()}")

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    )

    try:
        with progress:
            summary = generate_images(config, job, progress_callback=_build_progress_callback(progress))
    except ImageTestkitError as exc:
        typer.secho(f"生成失败：{exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    stats = summary.result.stats
    typer.echo(f"成功 {stats.completed} 张，失败 {stats.failed} 张。")
    typer.echo(f"耗时 {stats.duration():.2f}s（{stats.images_per_second():.1f} 张/秒）")
    if summary.result.error is not None:
        typer.secho(f"警告：{summary.result.error}", fg=typer.colors.YELLOW, err=True)
    typer.echo(f"清单文件：{summary.manifest_path}")
    typer.echo(summary.manifest_summary)
    if summary.report_path is not None:
        typer.echo(f"报告文件：{summary.report_path}")


@app.command("list")
def list_cli(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="自定义配置文件 (JSON)"),
) -> None:
    """列出当前配置中的比例预设、尺寸分类、格式与平台目标。"""

    try:
        config = load_config(config_file.expanduser().resolve() if config_file else None)
    except ImageTestkitError as exc:
        typer.secho(f"加载配置失败：{exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    for table in _build_tables(config):
        console.print(table)


def _build_tables(config: GeneratorConfig) -> list[Table]:
    presets = Table(title="比例预设")
    presets.add_column("名称")
    presets.add_column("比例")
    presets.add_column("说明")
    for name, preset in config.presets.items():
        presets.add_row(name, ", ".join(preset.ratios), preset.description)

    sizes = Table(title="尺寸分类")
    sizes.add_column("名称")
    sizes.add_column("基准尺寸 (px)")
    for name, size in config.sizes.items():
        sizes.add_row(name, ", ".join(str(value) for value in size.base_sizes))

    formats = Table(title="输出格式")
    formats.add_column("名称")
    formats.add_column("质量")
    formats.add_column("扩展名")
    for name, fmt in config.formats.items():
        formats.add_row(name, ", ".join(f"Q{value}" for value in fmt.qualities), fmt.extension)

    targets = Table(title="平台目标")
    targets.add_column("名称")
    targets.add_column("平台")
    targets.add_column("尺寸")
    targets.add_column("比例")
    for name, target in config.targets.items():
        width, height = target.dimensions
        targets.add_row(name, target.platform, f"{width}×{height}", target.ratio)

    return [presets, sizes, formats, targets]


if __name__ == "__main__":
    app()
