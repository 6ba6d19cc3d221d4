"""根据配置与筛选条件构建渲染任务列表。

三类任务按固定顺序拼接：比例预设、平台目标、边界用例。配置集合按声明顺序遍历，
相同输入总是得到相同的任务列表。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from image_testkit.core.config import EDGE_CATEGORY, FormatSpec, GeneratorConfig
from image_testkit.core.exceptions import BuildError, InvalidRatioError
from image_testkit.core.filters import Filters
from image_testkit.core.models import (
    SOURCE_EDGE_CASE,
    SOURCE_PLATFORM_TARGET,
    SOURCE_RATIO_PRESET,
    RenderJob,
)
from image_testkit.core.ratio import (
    compute_dimensions,
    parse_ratio,
    simplify_ratio,
    size_category_for_dimension,
)

LOGGER = logging.getLogger(__name__)

RATIOS_DIR = "ratio-preset"
TARGETS_DIR = "targets"
EDGE_CASES_DIR = "edge-cases"
CATEGORY_DIRS = (RATIOS_DIR, TARGETS_DIR, EDGE_CASES_DIR)

TARGET_QUALITY = 85


def nearest_quality(qualities: list[int], target: int = TARGET_QUALITY) -> int:
    """返回最接近 target 的质量值；按升序比较，距离相同时取较小值。"""

    if not qualities:
        return target
    return min(sorted(qualities), key=lambda value: abs(value - target))


def first_quality(fmt: FormatSpec) -> Optional[int]:
    return fmt.qualities[0] if fmt.qualities else None


class SpecBuilder:
    """将配置展开为 RenderJob 列表。"""

    def __init__(self, config: GeneratorConfig, filters: Optional[Filters], base_dir: Path) -> None:
        self.config = config
        self.filters = filters or Filters()
        self.base_dir = Path(base_dir)

    def build(self) -> list[RenderJob]:
        """生成全部任务；任一比例不合法时整体失败，不返回部分结果。"""

        ratio_jobs = self._build_ratio_jobs()
        target_jobs = self._build_target_jobs()
        edge_jobs = self._build_edge_case_jobs()
        LOGGER.info(
            "任务构建完成：比例预设 %d，平台目标 %d，边界用例 %d",
            len(ratio_jobs),
            len(target_jobs),
            len(edge_jobs),
        )

        jobs = [*ratio_jobs, *target_jobs, *edge_jobs]
        _ensure_unique_paths(jobs)
        return jobs

    def _build_ratio_jobs(self) -> list[RenderJob]:
        jobs: list[RenderJob] = []
        seen_display: set[str] = set()

        for preset_name, preset in self.config.presets.items():
            if not self.filters.include_ratio_category(preset_name):
                continue

            for ratio_str in preset.ratios:
                try:
                    info = parse_ratio(ratio_str)
                except InvalidRatioError as exc:
                    raise BuildError(f"预设 {preset_name} 中的比例 {ratio_str!r} 不合法: {exc}") from exc

                if info.display_name in seen_display:
                    LOGGER.debug("比例 %s 已由先前的预设生成，跳过（预设 %s）", ratio_str, preset_name)
                    continue
                seen_display.add(info.display_name)

                for size_name, size in self.config.sizes.items():
                    if not self.filters.include_size_category(size_name):
                        continue
                    if not size.base_sizes:
                        continue
                    width, height = compute_dimensions(info, size.base_sizes[0])

                    for format_name, fmt in self.config.formats.items():
                        if not self.filters.include_format(format_name):
                            continue
                        quality = first_quality(fmt)
                        if quality is None:
                            continue

                        filename = (
                            f"{size_name.lower()}_{width}x{height}_{format_name.lower()}"
                            f"_q{quality}{fmt.extension}"
                        )
                        jobs.append(
                            RenderJob(
                                width=width,
                                height=height,
                                ratio=info.ratio,
                                ratio_decimal=info.decimal,
                                format=format_name.upper(),
                                quality=quality,
                                size_category=size_name.title(),
                                source=SOURCE_RATIO_PRESET,
                                category=preset_name,
                                label=info.display_name,
                                output_path=self.base_dir / RATIOS_DIR / info.display_name / filename,
                                filename=filename,
                                extension=fmt.extension,
                                mime_type=fmt.mime_type,
                            )
                        )
        return jobs

    def _build_target_jobs(self) -> list[RenderJob]:
        jobs: list[RenderJob] = []

        for target_name, target in self.config.targets.items():
            try:
                info = parse_ratio(target.ratio)
            except InvalidRatioError as exc:
                raise BuildError(f"目标 {target_name} 的比例 {target.ratio!r} 不合法: {exc}") from exc

            category = self.config.category_for_ratio(target.ratio)
            if not self.filters.include_ratio_category(category):
                continue

            width, height = target.dimensions
            size_category = size_category_for_dimension(max(width, height))
            if not self.filters.include_size_category(size_category):
                continue

            for format_name, fmt in self.config.formats.items():
                if not self.filters.include_format(format_name):
                    continue
                quality = nearest_quality(fmt.qualities)

                filename = f"{target_name}_{width}x{height}_{format_name.lower()}_q{quality}{fmt.extension}"
                jobs.append(
                    RenderJob(
                        width=width,
                        height=height,
                        ratio=target.ratio,
                        ratio_decimal=info.decimal,
                        format=format_name.upper(),
                        quality=quality,
                        size_category=size_category.title(),
                        source=SOURCE_PLATFORM_TARGET,
                        category=category,
                        label=target_name,
                        output_path=self.base_dir / TARGETS_DIR / filename,
                        filename=filename,
                        extension=fmt.extension,
                        mime_type=fmt.mime_type,
                    )
                )
        return jobs

    def _build_edge_case_jobs(self) -> list[RenderJob]:
        jobs: list[RenderJob] = []
        if not self.filters.include_ratio_category(EDGE_CATEGORY):
            return jobs

        for edge_case in self.config.edge_cases:
            width, height = edge_case.dimensions
            ratio_str = simplify_ratio(width, height)
            size_category = size_category_for_dimension(max(width, height))
            if not self.filters.include_size_category(size_category):
                continue

            for format_name, fmt in self.config.formats.items():
                if not self.filters.include_format(format_name):
                    continue
                quality = first_quality(fmt)
                if quality is None:
                    continue

                filename = f"{edge_case.name}_{width}x{height}_{format_name.lower()}_q{quality}{fmt.extension}"
                jobs.append(
                    RenderJob(
                        width=width,
                        height=height,
                        ratio=ratio_str,
                        ratio_decimal=width / height,
                        format=format_name.upper(),
                        quality=quality,
                        size_category=size_category.title(),
                        source=SOURCE_EDGE_CASE,
                        category=EDGE_CATEGORY,
                        label=edge_case.name,
                        output_path=self.base_dir / EDGE_CASES_DIR / filename,
                        filename=filename,
                        extension=fmt.extension,
                        mime_type=fmt.mime_type,
                    )
                )
        return jobs


def build_jobs(config: GeneratorConfig, filters: Optional[Filters], base_dir: Path) -> list[RenderJob]:
    """构建任务列表的便捷入口。"""

    return SpecBuilder(config, filters, base_dir).build()


def _ensure_unique_paths(jobs: list[RenderJob]) -> None:
    seen: set[Path] = set()
    for job in jobs:
        if job.output_path in seen:
            raise BuildError(f"多个任务写入同一输出文件: {job.output_path}")
        seen.add(job.output_path)
