"""并发执行的工作单元：绘制、编码并记录单个任务的结果。"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from PIL import Image

from image_testkit.core.config import DEFAULT_PALETTE
from image_testkit.core.exceptions import RenderError
from image_testkit.core.models import GenerationOutcome, RenderJob
from image_testkit.core.output_manager import ImageWriteError, OutputManager, save_image
from image_testkit.processing.renderer import render_image

LOGGER = logging.getLogger(__name__)


def run_job(job: RenderJob, palette: Mapping[str, str] = DEFAULT_PALETTE) -> GenerationOutcome:
    """在工作线程中生成一张图片，任何阶段失败都转换为失败结果而不是抛出异常。"""

    image: Optional[Image.Image] = None

    try:
        image = render_image(job, palette)
    except (RenderError, ValueError, OSError) as exc:
        return GenerationOutcome(job=job, error=f"绘制 {job.filename} 失败: {exc}")

    try:
        save_image(image, job.output_path, job.format, job.quality)
    except ImageWriteError as exc:
        cause = exc.__cause__ or exc
        return GenerationOutcome(job=job, error=f"编码 {job.filename} 失败: {cause}")
    finally:
        image.close()

    try:
        file_size = OutputManager.file_size(job.output_path)
    except OSError as exc:
        return GenerationOutcome(job=job, error=f"无法读取 {job.filename} 的文件大小: {exc}")

    LOGGER.debug("已生成 %s（%d 字节）", job.output_path, file_size)
    return GenerationOutcome(job=job, file_size=file_size)
