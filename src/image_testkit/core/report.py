"""报告生成工具。"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from image_testkit.core.models import GenerationOutcome

HEADER = ["output_path", "status", "width", "height", "format", "quality", "file_size_bytes", "message"]


def write_csv_report(outcomes: Iterable[GenerationOutcome], output_dir: Path, filename: str) -> Path:
    """将所有任务结果（含失败项）写入 CSV 报告。"""

    report_path = output_dir / filename
    with report_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADER)
        for outcome in outcomes:
            job = outcome.job
            writer.writerow(
                [
                    str(job.output_path),
                    "generated" if outcome.succeeded else "failed",
                    job.width,
                    job.height,
                    job.format.lower(),
                    job.quality,
                    outcome.file_size if outcome.succeeded else "",
                    outcome.error or "",
                ]
            )
    return report_path
