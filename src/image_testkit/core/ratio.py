"""宽高比解析与尺寸计算。"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Tuple

from image_testkit.core.exceptions import InvalidRatioError

DECIMAL_SCALE = 100

# (上限, 分类名)，按最大边判断尺寸分类。
SIZE_BREAKPOINTS: Tuple[Tuple[int, str], ...] = (
    (200, "tiny"),
    (800, "small"),
    (1500, "medium"),
    (3000, "large"),
)
LARGEST_SIZE_CATEGORY = "xlarge"

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class RatioInfo:
    """解析后的比例信息。"""

    ratio: str
    width: int
    height: int
    decimal: float
    is_decimal: bool
    display_name: str  # 例如 "2-3"、"1_91-1"

    @property
    def is_portrait(self) -> bool:
        return self.height > self.width


def parse_ratio(text: str) -> RatioInfo:
    """解析形如 ``2:3`` 或 ``1.91:1`` 的比例字符串。

    任意一侧包含小数点时两侧均按小数处理，并放大 100 倍保存为整数分量；
    ``decimal`` 始终由原始浮点值计算。
    """

    ratio = (text or "").strip()
    parts = ratio.split(":")
    if len(parts) != 2:
        raise InvalidRatioError(f"比例格式不合法: {text!r}（应为 W:H）")

    width_str, height_str = (part.strip() for part in parts)
    is_decimal = "." in width_str or "." in height_str

    if is_decimal:
        w = _parse_number(width_str, float, text)
        h = _parse_number(height_str, float, text)
        if not (math.isfinite(w) and math.isfinite(h)) or w <= 0 or h <= 0:
            raise InvalidRatioError(f"比例分量必须为正数: {text!r}")
        width = int(round(w * DECIMAL_SCALE))
        height = int(round(h * DECIMAL_SCALE))
        decimal = w / h
    else:
        width = _parse_number(width_str, int, text)
        height = _parse_number(height_str, int, text)
        decimal = width / height if height > 0 else 0.0

    if width <= 0 or height <= 0:
        raise InvalidRatioError(f"比例分量必须为正数: {text!r}")

    return RatioInfo(
        ratio=ratio,
        width=width,
        height=height,
        decimal=decimal,
        is_decimal=is_decimal,
        display_name=make_display_name(ratio),
    )


def make_display_name(ratio: str) -> str:
    """生成可用于文件路径的比例标识。"""

    display = ratio.replace(":", "-").replace(".", "_")
    return _WHITESPACE_RE.sub("", display)


def compute_dimensions(info: RatioInfo, base_size: int) -> Tuple[int, int]:
    """根据比例与基准尺寸计算像素宽高。

    竖图以基准尺寸作为高度，横图与方图以基准尺寸作为宽度，结果至少为 1 像素。
    """

    if info.is_portrait:
        height = base_size
        width = _round_half_up(height * info.width / info.height)
    else:
        width = base_size
        height = _round_half_up(width * info.height / info.width)
    return max(width, 1), max(height, 1)


def gcd(a: int, b: int) -> int:
    """欧几里得算法求最大公约数。"""

    while b:
        a, b = b, a % b
    return a


def simplify_ratio(width: int, height: int) -> str:
    """将像素尺寸化简为整数比例字符串，例如 1024x768 -> ``4:3``。"""

    divisor = gcd(width, height)
    if divisor > 1:
        return f"{width // divisor}:{height // divisor}"
    return f"{width}:{height}"


def size_category_for_dimension(max_dimension: int) -> str:
    """按最大边返回尺寸分类。"""

    for limit, name in SIZE_BREAKPOINTS:
        if max_dimension <= limit:
            return name
    return LARGEST_SIZE_CATEGORY


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _parse_number(value: str, kind, original: str):
    if not value or "_" in value:
        raise InvalidRatioError(f"比例分量不是数字: {value!r}（{original!r}）")
    try:
        return kind(value)
    except ValueError as exc:
        raise InvalidRatioError(f"比例分量不是数字: {value!r}（{original!r}）") from exc
