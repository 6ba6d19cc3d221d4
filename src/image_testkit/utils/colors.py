"""颜色工具函数。"""

from __future__ import annotations

import re
from typing import Mapping, Tuple

from image_testkit.core.exceptions import ConfigError, RenderError

HEX_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

RGB = Tuple[int, int, int]


def parse_hex_color(value: str) -> RGB:
    """将 HEX 字符串解析为 RGB 三元组。"""

    match = HEX_COLOR_RE.match((value or "").strip())
    if not match:
        raise ConfigError(f"无法解析颜色值: {value!r}")

    hex_value = match.group(1)
    if len(hex_value) == 3:
        hex_value = "".join(ch * 2 for ch in hex_value)
    return tuple(int(hex_value[i : i + 2], 16) for i in (0, 2, 4))  # type: ignore[return-value]


def category_color(palette: Mapping[str, str], category: str) -> RGB:
    """从只读配色表中取分类颜色，缺失时抛出 RenderError。"""

    try:
        value = palette[category]
    except KeyError as exc:
        raise RenderError(f"未知的分类: {category}") from exc
    return parse_hex_color(value)
