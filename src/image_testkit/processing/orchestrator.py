"""并发生成调度：有界并发执行任务、收集结果、定时上报进度。"""

from __future__ import annotations

import enum
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Optional, Sequence

from image_testkit.core.exceptions import EmptyInputError, GenerationFailedError, OrchestratorStateError
from image_testkit.core.models import GenerationOutcome, GenerationResult, RenderJob, RunStatistics
from image_testkit.core.progress import ProgressUpdate
from image_testkit.processing.worker import run_job

LOGGER = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 10
DEFAULT_PROGRESS_INTERVAL = 0.25

RenderFunction = Callable[[RenderJob], GenerationOutcome]
ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


class OrchestratorState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


class Orchestrator:
    """以固定并发上限执行任务列表。

    线程池的 worker 数即准入上限；所有任务一次性提交，单个任务失败不会取消其他任务。
    进度由独立线程按固定间隔读取共享统计上报，结束后再补发一次最终进度。
    """

    def __init__(
        self,
        max_concurrency: int = DEFAULT_CONCURRENCY,
        render: RenderFunction = run_job,
        progress_interval: float = DEFAULT_PROGRESS_INTERVAL,
    ) -> None:
        if max_concurrency <= 0:
            max_concurrency = DEFAULT_CONCURRENCY
        self.max_concurrency = max_concurrency
        self.render = render
        self.progress_interval = progress_interval if progress_interval > 0 else DEFAULT_PROGRESS_INTERVAL
        self.stats = RunStatistics()
        self.state = OrchestratorState.IDLE
        self._state_lock = threading.Lock()

    def run_all(self, jobs: Sequence[RenderJob], progress_callback: ProgressCallback = None) -> GenerationResult:
        """执行全部任务，返回与任务数相同的结果列表（按完成顺序）。"""

        if not jobs:
            raise EmptyInputError("没有需要生成的图片任务")

        with self._state_lock:
            if self.state is OrchestratorState.RUNNING:
                raise OrchestratorStateError("调度器正在运行，不能重复启动")
            self.state = OrchestratorState.RUNNING

        self.stats = RunStatistics(total=len(jobs))
        self.stats.start()
        LOGGER.info("开始生成 %d 张图片，并发上限 %d", len(jobs), self.max_concurrency)

        stop_event = threading.Event()
        reporter: Optional[threading.Thread] = None
        if progress_callback is not None:
            reporter = threading.Thread(
                target=self._report_progress,
                args=(progress_callback, stop_event),
                name="progress-reporter",
                daemon=True,
            )
            reporter.start()

        outcomes: list[GenerationOutcome] = []
        try:
            with ThreadPoolExecutor(max_workers=self.max_concurrency, thread_name_prefix="render") as executor:
                futures: list[Future] = [executor.submit(self._execute, job) for job in jobs]
                for future in as_completed(futures):
                    outcomes.append(future.result())
        finally:
            stop_event.set()
            if reporter is not None:
                reporter.join()
            self.stats.finish()
            with self._state_lock:
                self.state = OrchestratorState.FINISHED

        if progress_callback is not None:
            self._emit(progress_callback, status="finished")

        error: Optional[GenerationFailedError] = None
        if self.stats.failed:
            error = GenerationFailedError(self.stats.failed, self.stats.total)
            LOGGER.warning("%s", error)
        LOGGER.info(
            "生成结束：成功 %d，失败 %d，耗时 %.2fs（%.1f 张/秒）",
            self.stats.completed,
            self.stats.failed,
            self.stats.duration(),
            self.stats.images_per_second(),
        )
        return GenerationResult(outcomes=outcomes, stats=self.stats, error=error)

    def _execute(self, job: RenderJob) -> GenerationOutcome:
        """在工作线程中执行单个任务，并原子地更新成功或失败计数。"""

        try:
            outcome = self.render(job)
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("任务执行异常：%s", job.filename)
            outcome = GenerationOutcome(job=job, error=f"生成 {job.filename} 失败: {exc}")

        if not outcome.succeeded:
            LOGGER.warning("%s", outcome.error)
        self.stats.record(outcome.succeeded)
        return outcome

    def _report_progress(self, callback: Callable[[ProgressUpdate], None], stop_event: threading.Event) -> None:
        while not stop_event.wait(self.progress_interval):
            self._emit(callback)

    def _emit(self, callback: Callable[[ProgressUpdate], None], status: str = "running") -> None:
        completed, failed = self.stats.snapshot()
        update = ProgressUpdate(
            total=self.stats.total,
            completed=completed,
            failed=failed,
            elapsed=self.stats.duration(),
            status=status,
        )
        try:
            callback(update)
        except Exception:  # noqa: BLE001
            LOGGER.exception("进度回调执行失败")
