"""进度更新的数据模型。"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class ProgressUpdate:
    """生成过程中的进度信息。"""

    total: int
    completed: int
    failed: int = 0
    elapsed: float = 0.0
    status: str = "running"

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return self.completed / self.total * 100
