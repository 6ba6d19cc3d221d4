"""生成范围筛选条件。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

from image_testkit.core.exceptions import FilterError

if TYPE_CHECKING:
    from image_testkit.core.config import GeneratorConfig


def _normalize(values: Optional[Iterable[str]]) -> Tuple[str, ...]:
    """转小写并去除空白项。"""

    if not values:
        return ()
    result = []
    for value in values:
        cleaned = (value or "").strip().lower()
        if cleaned:
            result.append(cleaned)
    return tuple(result)


@dataclass(frozen=True, slots=True)
class Filters:
    """比例分类、尺寸分类与格式三个维度的白名单，空列表表示不限制。"""

    ratios: Tuple[str, ...] = ()
    sizes: Tuple[str, ...] = ()
    formats: Tuple[str, ...] = ()

    @classmethod
    def from_lists(
        cls,
        ratios: Optional[Iterable[str]] = None,
        sizes: Optional[Iterable[str]] = None,
        formats: Optional[Iterable[str]] = None,
    ) -> "Filters":
        return cls(ratios=_normalize(ratios), sizes=_normalize(sizes), formats=_normalize(formats))

    def is_empty(self) -> bool:
        return not (self.ratios or self.sizes or self.formats)

    def include_ratio_category(self, category: str) -> bool:
        return _allowed(self.ratios, category)

    def include_size_category(self, category: str) -> bool:
        return _allowed(self.sizes, category)

    def include_format(self, name: str) -> bool:
        return _allowed(self.formats, name)

    def validate(self, config: GeneratorConfig) -> None:
        """校验所有筛选值都能在配置中找到（忽略大小写），否则抛出 FilterError。"""

        checks = (
            ("比例分类", self.ratios, config.presets),
            ("尺寸分类", self.sizes, config.sizes),
            ("格式", self.formats, config.formats),
        )
        for label, values, known in checks:
            known_keys = {key.lower() for key in known}
            for value in values:
                if value not in known_keys:
                    choices = ", ".join(sorted(known_keys))
                    raise FilterError(f"未知的{label}: {value}（可选: {choices}）")

    def summary(self) -> str:
        """返回便于展示的筛选条件描述。"""

        if self.is_empty():
            return "无筛选（生成全部）"

        parts = []
        if self.ratios:
            parts.append("ratios: " + ", ".join(self.ratios))
        if self.sizes:
            parts.append("sizes: " + ", ".join(self.sizes))
        if self.formats:
            parts.append("formats: " + ", ".join(self.formats))
        return " | ".join(parts)


def _allowed(allow_list: Tuple[str, ...], value: str) -> bool:
    if not allow_list:
        return True
    return value.lower() in allow_list
