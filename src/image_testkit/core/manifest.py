"""生成结果清单（manifest.json）。"""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path, PurePath
from typing import Iterable, Optional

from image_testkit.core.builder import CATEGORY_DIRS
from image_testkit.core.exceptions import ImageTestkitError
from image_testkit.core.models import GenerationOutcome


@dataclass(slots=True)
class ImageRecord:
    """清单中单张图片的元数据。"""

    filename: str
    category: str
    subcategory: str
    width: int
    height: int
    ratio: str
    ratio_decimal: float
    format: str
    quality: int
    file_size_bytes: int
    size_category: str


@dataclass(slots=True)
class Manifest:
    tool_version: str
    config_version: str
    base_dir: Optional[Path] = None
    generated_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    )
    images: list[ImageRecord] = field(default_factory=list)

    @property
    def total_images(self) -> int:
        return len(self.images)

    def add_outcome(self, outcome: GenerationOutcome) -> None:
        """记录一个成功结果，失败结果直接忽略。"""

        if not outcome.succeeded:
            return

        job = outcome.job
        category, subcategory = extract_category(job.output_path, self.base_dir)
        self.images.append(
            ImageRecord(
                filename=relative_output_path(job.output_path, self.base_dir),
                category=category,
                subcategory=subcategory,
                width=job.width,
                height=job.height,
                ratio=job.ratio,
                ratio_decimal=job.ratio_decimal,
                format=job.format.lower(),
                quality=job.quality,
                file_size_bytes=outcome.file_size,
                size_category=job.size_category.lower(),
            )
        )

    def extend(self, outcomes: Iterable[GenerationOutcome]) -> None:
        for outcome in outcomes:
            self.add_outcome(outcome)

    def to_dict(self) -> dict:
        return {
            "generated_at": self.generated_at,
            "tool_version": self.tool_version,
            "config_version": self.config_version,
            "total_images": self.total_images,
            "images": [asdict(record) for record in self.images],
        }

    def write(self, path: Path) -> Path:
        try:
            with Path(path).open("w", encoding="utf-8") as handle:
                json.dump(self.to_dict(), handle, ensure_ascii=False, indent=2)
        except OSError as exc:
            raise ImageTestkitError(f"写入清单失败: {path}") from exc
        return Path(path)

    def summary(self) -> str:
        if not self.images:
            return "没有生成任何图片"

        counts = Counter(record.category for record in self.images)
        total_mb = sum(record.file_size_bytes for record in self.images) / (1024 * 1024)
        lines = [f"共生成 {self.total_images} 张图片（合计 {total_mb:.2f} MB）", "按分类统计："]
        lines.extend(f"  {category}: {count}" for category, count in counts.items())
        return "\n".join(lines)


def _layout_path(path: Path, base_dir: Optional[Path]) -> PurePath:
    """去掉输出根目录前缀，避免根目录自身的同名片段被误认为分类目录。"""

    pure = PurePath(path)
    if base_dir is not None and pure.is_relative_to(base_dir):
        return pure.relative_to(base_dir)
    return pure


def extract_category(path: Path, base_dir: Optional[Path] = None) -> tuple[str, str]:
    """从输出路径中找出分类目录及其后的子分类，例如 ``ratio-preset/2-3/x.jpg`` -> (ratio-preset, 2-3)。"""

    parts = _layout_path(path, base_dir).parent.parts
    for index, part in enumerate(parts):
        if part in CATEGORY_DIRS:
            subcategory = parts[index + 1] if index + 1 < len(parts) else ""
            return part, subcategory
    return "", ""


def relative_output_path(path: Path, base_dir: Optional[Path] = None) -> str:
    """返回从分类目录开始的相对路径，找不到分类目录时只返回文件名。"""

    layout = _layout_path(path, base_dir)
    parts = layout.parts
    for index, part in enumerate(parts):
        if part in CATEGORY_DIRS:
            return "/".join(parts[index:])
    return layout.name
