"""生成器配置模型与加载。"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from itertools import cycle
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from image_testkit.core.defaults import DEFAULT_CONFIG
from image_testkit.core.exceptions import ConfigError, InvalidRatioError
from image_testkit.core.filters import Filters
from image_testkit.core.ratio import parse_ratio

LOGGER = logging.getLogger(__name__)

EDGE_CATEGORY = "edge"

DEFAULT_PALETTE: Mapping[str, str] = {
    "platform": "#4A90E2",
    "common": "#7ED321",
    "edge": "#F5A623",
}

# 自定义预设没有配色时依次取用。
EXTRA_COLORS: Tuple[str, ...] = ("#9013FE", "#D0021B", "#50E3C2", "#8B572A", "#417505", "#BD10E0")


@dataclass(slots=True)
class RatioPreset:
    """比例预设分类。"""

    ratios: List[str]
    description: str = ""


@dataclass(slots=True)
class SizeCategory:
    """尺寸分类，base_sizes 的第一个值作为代表尺寸。"""

    base_sizes: List[int]
    description: str = ""


@dataclass(slots=True)
class FormatSpec:
    """输出格式及其质量档位。"""

    qualities: List[int]
    mime_type: str = ""
    extension: str = ""


@dataclass(slots=True)
class PlatformTarget:
    """平台目标尺寸。"""

    dimensions: List[int]
    ratio: str
    platform: str = ""
    description: str = ""


@dataclass(slots=True)
class EdgeCase:
    """边界尺寸用例。"""

    name: str
    dimensions: List[int]
    description: str = ""


@dataclass(slots=True)
class GeneratorConfig:
    """完整的生成配置。"""

    version: str
    presets: Dict[str, RatioPreset]
    sizes: Dict[str, SizeCategory]
    formats: Dict[str, FormatSpec]
    targets: Dict[str, PlatformTarget] = field(default_factory=dict)
    edge_cases: List[EdgeCase] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GeneratorConfig":
        """从 JSON 结构构建配置，字段类型错误时抛出 ConfigError。"""

        if not isinstance(data, Mapping):
            raise ConfigError("配置根节点必须是对象")

        try:
            return cls(
                version=str(data.get("version") or ""),
                presets={
                    name: RatioPreset(
                        ratios=[str(r) for r in item.get("ratios") or []],
                        description=item.get("description", ""),
                    )
                    for name, item in (data.get("presets") or {}).items()
                },
                sizes={
                    name: SizeCategory(
                        base_sizes=_int_list(item.get("base_sizes"), f"尺寸分类 {name} 的 base_sizes"),
                        description=item.get("description", ""),
                    )
                    for name, item in (data.get("sizes") or {}).items()
                },
                formats={
                    name: FormatSpec(
                        qualities=_int_list(item.get("qualities"), f"格式 {name} 的 qualities"),
                        mime_type=item.get("mime_type", ""),
                        extension=item.get("extension") or _default_extension(name),
                    )
                    for name, item in (data.get("formats") or {}).items()
                },
                targets={
                    name: PlatformTarget(
                        dimensions=_int_list(item.get("dimensions"), f"目标 {name} 的 dimensions"),
                        ratio=str(item.get("ratio") or ""),
                        platform=item.get("platform", ""),
                        description=item.get("description", ""),
                    )
                    for name, item in (data.get("targets") or {}).items()
                },
                edge_cases=[
                    EdgeCase(
                        name=str(item.get("name") or ""),
                        dimensions=_int_list(
                            item.get("dimensions"), f"边界用例 {item.get('name')} 的 dimensions"
                        ),
                        description=item.get("description", ""),
                    )
                    for item in data.get("edge_cases") or []
                ],
            )
        except (AttributeError, TypeError, ValueError) as exc:
            raise ConfigError(f"配置结构不合法: {exc}") from exc

    def validate(self) -> None:
        """校验配置，发现问题立即抛出 ConfigError。"""

        if not self.version:
            raise ConfigError("缺少 version 字段")
        if not self.presets:
            raise ConfigError("至少需要一个比例预设")
        if not self.sizes:
            raise ConfigError("至少需要一个尺寸分类")
        if not self.formats:
            raise ConfigError("至少需要一种输出格式")

        for preset_name, preset in self.presets.items():
            for ratio in preset.ratios:
                try:
                    parse_ratio(ratio)
                except InvalidRatioError as exc:
                    raise ConfigError(f"预设 {preset_name} 中的比例 {ratio!r} 不合法: {exc}") from exc

        for size_name, size in self.sizes.items():
            if any(value <= 0 for value in size.base_sizes):
                raise ConfigError(f"尺寸分类 {size_name} 的 base_sizes 必须为正整数")

        for format_name, fmt in self.formats.items():
            if any(not 1 <= value <= 100 for value in fmt.qualities):
                raise ConfigError(f"格式 {format_name} 的质量必须在 1~100 之间")

        for target_name, target in self.targets.items():
            _check_name(f"目标 {target_name}", target_name)
            _check_dimensions(f"目标 {target_name}", target.dimensions)
            try:
                parse_ratio(target.ratio)
            except InvalidRatioError as exc:
                raise ConfigError(f"目标 {target_name} 的比例 {target.ratio!r} 不合法: {exc}") from exc

        seen_names: set[str] = set()
        for edge_case in self.edge_cases:
            if not edge_case.name:
                raise ConfigError("边界用例缺少 name 字段")
            if edge_case.name in seen_names:
                raise ConfigError(f"边界用例名称重复: {edge_case.name}")
            seen_names.add(edge_case.name)
            _check_name(f"边界用例 {edge_case.name}", edge_case.name)
            _check_dimensions(f"边界用例 {edge_case.name}", edge_case.dimensions)

    def category_for_ratio(self, ratio: str) -> str:
        """返回第一个声明了该比例字符串的预设名，找不到时归入 edge。"""

        for preset_name, preset in self.presets.items():
            if ratio in preset.ratios:
                return preset_name
        return EDGE_CATEGORY

    def size_category_name(self, base_size: int) -> str:
        """返回包含该基准尺寸的尺寸分类名。"""

        for size_name, size in self.sizes.items():
            if base_size in size.base_sizes:
                return size_name
        return "unknown"


@dataclass(slots=True)
class JobConfig:
    """单次生成任务的运行参数。"""

    output_dir: Path
    filters: Filters = field(default_factory=Filters)
    max_workers: int = 10
    progress_interval: float = 0.25
    clean: bool = False
    manifest_filename: str = "manifest.json"
    report_filename: str = "report.csv"
    palette: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_PALETTE))


def load_config(path: Optional[Path] = None) -> GeneratorConfig:
    """加载配置文件；未指定路径时使用内置默认配置。"""

    if path is None:
        LOGGER.debug("使用内置默认配置")
        data: Any = DEFAULT_CONFIG
    else:
        try:
            with Path(path).open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except OSError as exc:
            raise ConfigError(f"无法读取配置文件: {path}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"配置文件不是合法的 JSON: {path} ({exc})") from exc

    config = GeneratorConfig.from_dict(data)
    config.validate()
    return config


def resolve_palette(config: GeneratorConfig, palette: Mapping[str, str]) -> Dict[str, str]:
    """为配置中所有预设与 edge 分类补全配色，返回只读使用的新映射。"""

    resolved = dict(palette)
    extras = cycle(EXTRA_COLORS)
    for category in [*config.presets, EDGE_CATEGORY]:
        if category not in resolved:
            resolved[category] = next(extras)
    return resolved


def _check_dimensions(label: str, dimensions: Sequence[int]) -> None:
    if len(dimensions) != 2:
        raise ConfigError(f"{label} 必须正好包含两个尺寸值")
    if dimensions[0] <= 0 or dimensions[1] <= 0:
        raise ConfigError(f"{label} 的尺寸必须为正数")


def _int_list(values: Any, label: str) -> List[int]:
    """JSON 中的整数字段不接受小数、布尔值或字符串。"""

    result: List[int] = []
    for value in values or []:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"{label} 必须为整数: {value!r}")
        result.append(value)
    return result


def _check_name(label: str, name: str) -> None:
    # 名称直接用作文件名前缀。
    if "/" in name or "\\" in name:
        raise ConfigError(f"{label} 的名称不能包含路径分隔符")


def _default_extension(format_name: str) -> str:
    lowered = format_name.lower()
    if lowered in {"jpeg", "jpg"}:
        return ".jpg"
    return f".{lowered}"
