"""测试共用的配置与任务构造工具。"""

from __future__ import annotations

from pathlib import Path

import pytest

from image_testkit.core.config import GeneratorConfig
from image_testkit.core.models import SOURCE_RATIO_PRESET, RenderJob


@pytest.fixture()
def small_config() -> GeneratorConfig:
    """体积很小的配置，便于在测试中真实生成图片。"""

    return GeneratorConfig.from_dict(
        {
            "version": "test-1.0",
            "presets": {
                "platform": {"description": "平台", "ratios": ["2:3", "1:1"]},
                "edge": {"description": "极端", "ratios": ["2:1"]},
            },
            "sizes": {
                "tiny": {"description": "tiny", "base_sizes": [60, 90]},
                "small": {"description": "small", "base_sizes": [120]},
            },
            "formats": {
                "jpeg": {"qualities": [60, 82, 95], "mime_type": "image/jpeg", "extension": ".jpg"},
                "png": {"qualities": [95], "mime_type": "image/png", "extension": ".png"},
            },
            "targets": {
                "TEST_SQUARE": {
                    "platform": "Test",
                    "dimensions": [80, 80],
                    "ratio": "1:1",
                    "description": "方图",
                },
            },
            "edge_cases": [
                {"name": "wide_strip", "dimensions": [160, 20], "description": "8:1"},
            ],
        }
    )


def make_job(output_dir: Path, name: str = "sample", **overrides) -> RenderJob:
    fields = dict(
        width=64,
        height=48,
        ratio="4:3",
        ratio_decimal=4 / 3,
        format="PNG",
        quality=95,
        size_category="Tiny",
        source=SOURCE_RATIO_PRESET,
        category="platform",
        label="4-3",
        output_path=output_dir / f"{name}.png",
        filename=f"{name}.png",
        extension=".png",
        mime_type="image/png",
    )
    fields.update(overrides)
    return RenderJob(**fields)
