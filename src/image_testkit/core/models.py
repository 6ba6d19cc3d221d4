"""核心数据模型定义。"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from image_testkit.core.exceptions import GenerationFailedError, OrchestratorStateError

SOURCE_RATIO_PRESET = "ratio-preset"
SOURCE_PLATFORM_TARGET = "platform-target"
SOURCE_EDGE_CASE = "edge-case"


@dataclass(frozen=True, slots=True)
class RenderJob:
    """单张待生成图片的完整描述，构建后只读。"""

    width: int
    height: int
    ratio: str
    ratio_decimal: float
    format: str
    quality: int
    size_category: str
    source: str
    category: str
    label: str
    output_path: Path
    filename: str
    extension: str = ""
    mime_type: str = ""


@dataclass(frozen=True, slots=True)
class GenerationOutcome:
    """单个任务的执行结果。"""

    job: RenderJob
    file_size: int = 0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class RunStatistics:
    """一次运行的计数与计时，运行期间由调度器独占更新，结束后冻结。"""

    def __init__(self, total: int = 0) -> None:
        self.total = total
        self.completed = 0
        self.failed = 0
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self._lock = threading.Lock()
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def start(self) -> None:
        self.start_time = time.monotonic()

    def record(self, succeeded: bool) -> None:
        """记录一个任务结束，成功与失败计数二者只增其一。"""

        with self._lock:
            if self._frozen:
                raise OrchestratorStateError("统计已冻结，不能再记录结果")
            if self.completed + self.failed >= self.total:
                raise OrchestratorStateError("记录的结果数超过任务总数")
            if succeeded:
                self.completed += 1
            else:
                self.failed += 1

    def snapshot(self) -> tuple[int, int]:
        with self._lock:
            return self.completed, self.failed

    def finish(self) -> None:
        with self._lock:
            self.end_time = time.monotonic()
            self._frozen = True

    def duration(self) -> float:
        """返回耗时（秒）；运行中返回自开始以来的时间。"""

        if self.start_time is None:
            return 0.0
        if self.end_time is None:
            return time.monotonic() - self.start_time
        return self.end_time - self.start_time

    def images_per_second(self) -> float:
        duration = self.duration()
        if duration <= 0:
            return 0.0
        return self.completed / duration


@dataclass(slots=True)
class GenerationResult:
    """一次运行的全部结果，outcomes 按完成顺序排列。"""

    outcomes: list[GenerationOutcome]
    stats: RunStatistics
    error: Optional[GenerationFailedError] = None

    @property
    def succeeded(self) -> list[GenerationOutcome]:
        return [outcome for outcome in self.outcomes if outcome.succeeded]

    @property
    def failed(self) -> list[GenerationOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]

    def raise_for_failures(self) -> None:
        if self.error is not None:
            raise self.error


@dataclass(slots=True)
class RunSummary:
    """流水线完成后的汇总信息。"""

    result: GenerationResult
    manifest_path: Path
    report_path: Optional[Path] = None
    jobs: list[RenderJob] = field(default_factory=list)
    manifest_summary: str = ""
