"""日志初始化。"""

from __future__ import annotations

import logging


def setup_logging(level: int = logging.INFO) -> None:
    """初始化项目日志配置，工作线程名会出现在每条日志中。"""

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(threadName)s] %(levelname)s %(name)s: %(message)s",
    )
    # Pillow 的插件加载日志在 DEBUG 下过于嘈杂。
    logging.getLogger("PIL").setLevel(max(level, logging.INFO))
