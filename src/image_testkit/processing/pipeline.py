"""生成流水线：校验筛选、准备目录、构建任务、并发生成、写出清单与报告。"""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Optional

from image_testkit.core.builder import build_jobs
from image_testkit.core.config import GeneratorConfig, JobConfig, resolve_palette
from image_testkit.core.manifest import Manifest
from image_testkit.core.models import RunSummary
from image_testkit.core.output_manager import OutputManager
from image_testkit.core.progress import ProgressUpdate
from image_testkit.core.report import write_csv_report
from image_testkit.core.version import TOOL_VERSION
from image_testkit.processing.orchestrator import Orchestrator
from image_testkit.processing.worker import run_job

LOGGER = logging.getLogger(__name__)

ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


def generate_images(
    config: GeneratorConfig,
    job_config: JobConfig,
    progress_callback: ProgressCallback = None,
) -> RunSummary:
    """批量生成入口。

    筛选条件或配置错误会在任何任务执行前抛出；单个任务失败只记录在结果中，
    清单仍然包含所有成功生成的图片。
    """

    job_config.filters.validate(config)
    LOGGER.info("筛选条件：%s", job_config.filters.summary())

    output_manager = OutputManager(job_config.output_dir)
    if job_config.clean:
        output_manager.clean()
    output_manager.ensure_structure()

    jobs = build_jobs(config, job_config.filters, output_manager.base_dir)
    LOGGER.info("共构建 %d 个生成任务", len(jobs))

    palette = resolve_palette(config, job_config.palette)
    orchestrator = Orchestrator(
        max_concurrency=job_config.max_workers,
        render=partial(run_job, palette=palette),
        progress_interval=job_config.progress_interval,
    )
    result = orchestrator.run_all(jobs, progress_callback=progress_callback)

    # 结果按完成顺序返回，清单按任务构建顺序写出以保证可复现。
    order = {job.output_path: index for index, job in enumerate(jobs)}
    ordered = sorted(result.outcomes, key=lambda outcome: order[outcome.job.output_path])

    manifest = Manifest(
        tool_version=TOOL_VERSION,
        config_version=config.version,
        base_dir=output_manager.base_dir,
    )
    manifest.extend(ordered)
    manifest_path = manifest.write(output_manager.base_dir / job_config.manifest_filename)
    LOGGER.info("清单已写入：%s", manifest_path)

    report_path = None
    try:
        report_path = write_csv_report(ordered, output_manager.base_dir, job_config.report_filename)
    except OSError as exc:
        LOGGER.error("写入报告失败：%s", exc)

    return RunSummary(
        result=result,
        manifest_path=manifest_path,
        report_path=report_path,
        jobs=jobs,
        manifest_summary=manifest.summary(),
    )
