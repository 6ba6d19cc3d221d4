"""配置加载校验与任务构建测试。"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from image_testkit.core.builder import (
    EDGE_CASES_DIR,
    RATIOS_DIR,
    TARGETS_DIR,
    SpecBuilder,
    build_jobs,
    nearest_quality,
)
from image_testkit.core.config import EDGE_CATEGORY, GeneratorConfig, load_config, resolve_palette
from image_testkit.core.exceptions import BuildError, ConfigError
from image_testkit.core.filters import Filters
from image_testkit.core.models import SOURCE_EDGE_CASE, SOURCE_PLATFORM_TARGET, SOURCE_RATIO_PRESET


def _minimal_dict(**overrides) -> dict:
    data = {
        "version": "1.0.0",
        "presets": {"test": {"ratios": ["1:1"]}},
        "sizes": {"test": {"base_sizes": [100]}},
        "formats": {"jpeg": {"qualities": [85], "extension": ".jpg"}},
    }
    data.update(overrides)
    return data


def test_load_default_config() -> None:
    config = load_config()

    assert config.version
    assert {"platform", "common", "edge"} <= set(config.presets)
    assert list(config.sizes) == ["tiny", "small", "medium", "large", "xlarge"]
    assert config.formats["jpeg"].qualities == [60, 82, 95]
    assert config.targets["LI_1_91_1"].dimensions == [1200, 628]


def test_load_custom_config_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(_minimal_dict(version="test-1.0")), encoding="utf-8")

    config = load_config(path)

    assert config.version == "test-1.0"
    assert "test" in config.presets
    assert config.targets == {}
    assert config.edge_cases == []


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.json")


def test_load_config_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


@pytest.mark.parametrize(
    ("overrides", "needle"),
    [
        ({"version": ""}, "version"),
        ({"presets": {}}, "预设"),
        ({"sizes": {}}, "尺寸"),
        ({"formats": {}}, "格式"),
        ({"presets": {"bad": {"ratios": ["invalid"]}}}, "bad"),
        ({"targets": {"BAD_TARGET": {"dimensions": [0, 100], "ratio": "1:1"}}}, "BAD_TARGET"),
        ({"targets": {"ONE_DIM": {"dimensions": [100], "ratio": "1:1"}}}, "ONE_DIM"),
        ({"targets": {"BAD_RATIO": {"dimensions": [100, 100], "ratio": "1x1"}}}, "BAD_RATIO"),
        ({"edge_cases": [{"name": "neg", "dimensions": [-1, 10]}]}, "neg"),
        ({"edge_cases": [{"name": "dup", "dimensions": [1, 1]}, {"name": "dup", "dimensions": [2, 2]}]}, "dup"),
        ({"formats": {"jpeg": {"qualities": [0]}}}, "jpeg"),
        ({"sizes": {"zero": {"base_sizes": [0]}}}, "zero"),
        ({"targets": {"nested/TARGET": {"dimensions": [100, 100], "ratio": "1:1"}}}, "nested/TARGET"),
        ({"edge_cases": [{"name": "../escape", "dimensions": [10, 10]}]}, "escape"),
        ({"edge_cases": [{"name": "win\\case", "dimensions": [10, 10]}]}, "路径分隔符"),
    ],
)
def test_validate_rejects_invalid_config(overrides: dict, needle: str) -> None:
    config = GeneratorConfig.from_dict(_minimal_dict(**overrides))

    with pytest.raises(ConfigError, match=needle):
        config.validate()


def test_from_dict_rejects_wrong_types() -> None:
    with pytest.raises(ConfigError):
        GeneratorConfig.from_dict(_minimal_dict(sizes={"tiny": {"base_sizes": ["abc"]}}))
    with pytest.raises(ConfigError):
        GeneratorConfig.from_dict(["not", "a", "mapping"])  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("overrides", "needle"),
    [
        ({"sizes": {"tiny": {"base_sizes": [100.9]}}}, "base_sizes"),
        ({"formats": {"jpeg": {"qualities": [True]}}}, "qualities"),
        ({"targets": {"HALF": {"dimensions": [100, 50.5], "ratio": "2:1"}}}, "HALF"),
        ({"edge_cases": [{"name": "fraction", "dimensions": [0.5, 10]}]}, "fraction"),
    ],
)
def test_from_dict_rejects_non_integer_numbers(overrides: dict, needle: str) -> None:
    with pytest.raises(ConfigError, match=needle):
        GeneratorConfig.from_dict(_minimal_dict(**overrides))


def test_category_for_ratio() -> None:
    config = GeneratorConfig.from_dict(
        _minimal_dict(
            presets={
                "platform": {"ratios": ["2:3", "4:5", "1:1"]},
                "common": {"ratios": ["3:2", "16:9", "1:1"]},
            }
        )
    )

    assert config.category_for_ratio("2:3") == "platform"
    assert config.category_for_ratio("16:9") == "common"
    # 多个预设声明同一比例时取第一个。
    assert config.category_for_ratio("1:1") == "platform"
    assert config.category_for_ratio("99:99") == EDGE_CATEGORY


def test_size_category_name(small_config: GeneratorConfig) -> None:
    assert small_config.size_category_name(90) == "tiny"
    assert small_config.size_category_name(120) == "small"
    assert small_config.size_category_name(999) == "unknown"


def test_resolve_palette_covers_custom_presets() -> None:
    config = GeneratorConfig.from_dict(_minimal_dict())
    palette = resolve_palette(config, {"platform": "#4A90E2"})

    assert palette["platform"] == "#4A90E2"
    assert "test" in palette
    assert EDGE_CATEGORY in palette


def test_build_counts_with_empty_filters(small_config: GeneratorConfig, tmp_path: Path) -> None:
    jobs = build_jobs(small_config, Filters(), tmp_path)

    ratio_count = 3 * 2 * 2
    target_count = 1 * 2
    edge_count = 1 * 2
    assert len(jobs) == ratio_count + target_count + edge_count

    sources = [job.source for job in jobs]
    assert sources == (
        [SOURCE_RATIO_PRESET] * ratio_count + [SOURCE_PLATFORM_TARGET] * target_count + [SOURCE_EDGE_CASE] * edge_count
    )


def test_default_config_job_count_matches_formula(tmp_path: Path) -> None:
    config = load_config()
    jobs = build_jobs(config, None, tmp_path)

    ratio_total = sum(len(preset.ratios) for preset in config.presets.values())
    expected = (
        ratio_total * len(config.sizes) * len(config.formats)
        + len(config.targets) * len(config.formats)
        + len(config.edge_cases) * len(config.formats)
    )
    assert len(jobs) == expected
    assert len({job.output_path for job in jobs}) == len(jobs)


def test_ratio_preset_jobs_use_representative_size_and_quality(
    small_config: GeneratorConfig, tmp_path: Path
) -> None:
    jobs = build_jobs(small_config, Filters(), tmp_path)
    first = jobs[0]

    assert (first.width, first.height) == (40, 60)
    assert first.quality == 60
    assert first.format == "JPEG"
    assert first.size_category == "Tiny"
    assert first.category == "platform"
    assert first.ratio == "2:3"
    assert first.filename == "tiny_40x60_jpeg_q60.jpg"
    assert first.output_path == tmp_path / RATIOS_DIR / "2-3" / "tiny_40x60_jpeg_q60.jpg"

    png_small = [job for job in jobs if job.label == "2-3" and job.format == "PNG" and job.size_category == "Small"]
    assert len(png_small) == 1
    assert (png_small[0].width, png_small[0].height) == (80, 120)
    assert png_small[0].quality == 95


def test_target_jobs(small_config: GeneratorConfig, tmp_path: Path) -> None:
    jobs = [job for job in build_jobs(small_config, Filters(), tmp_path) if job.source == SOURCE_PLATFORM_TARGET]

    assert [job.filename for job in jobs] == [
        "TEST_SQUARE_80x80_jpeg_q82.jpg",
        "TEST_SQUARE_80x80_png_q95.png",
    ]
    assert all(job.category == "platform" for job in jobs)
    assert all(job.size_category == "Tiny" for job in jobs)
    assert jobs[0].output_path == tmp_path / TARGETS_DIR / "TEST_SQUARE_80x80_jpeg_q82.jpg"


def test_target_with_unknown_ratio_falls_into_edge(tmp_path: Path) -> None:
    config = GeneratorConfig.from_dict(
        _minimal_dict(targets={"ODD": {"dimensions": [3500, 1000], "ratio": "7:2"}})
    )

    jobs = build_jobs(config, Filters(), tmp_path)
    target = [job for job in jobs if job.source == SOURCE_PLATFORM_TARGET][0]

    assert target.category == EDGE_CATEGORY
    assert target.size_category == "Xlarge"
    assert target.quality == 85


def test_edge_case_jobs(small_config: GeneratorConfig, tmp_path: Path) -> None:
    jobs = [job for job in build_jobs(small_config, Filters(), tmp_path) if job.source == SOURCE_EDGE_CASE]

    assert [job.filename for job in jobs] == ["wide_strip_160x20_jpeg_q60.jpg", "wide_strip_160x20_png_q95.png"]
    assert jobs[0].ratio == "8:1"
    assert jobs[0].ratio_decimal == pytest.approx(8.0)
    assert jobs[0].category == EDGE_CATEGORY
    assert jobs[0].output_path.parent == tmp_path / EDGE_CASES_DIR


def test_edge_case_ratio_is_simplified(tmp_path: Path) -> None:
    config = GeneratorConfig.from_dict(_minimal_dict(edge_cases=[{"name": "xga", "dimensions": [1024, 768]}]))

    job = [job for job in build_jobs(config, Filters(), tmp_path) if job.source == SOURCE_EDGE_CASE][0]

    assert job.ratio == "4:3"
    assert job.size_category == "Medium"


def test_edge_case_skips_formats_without_qualities(tmp_path: Path) -> None:
    config = GeneratorConfig.from_dict(
        _minimal_dict(
            formats={
                "jpeg": {"qualities": [70], "extension": ".jpg"},
                "png": {"qualities": [], "extension": ".png"},
            },
            edge_cases=[{"name": "square", "dimensions": [10, 10]}],
        )
    )

    jobs = build_jobs(config, Filters(), tmp_path)

    assert [job.format for job in jobs if job.source == SOURCE_EDGE_CASE] == ["JPEG"]
    assert [job.format for job in jobs if job.source == SOURCE_RATIO_PRESET] == ["JPEG"]


@pytest.mark.parametrize(
    ("filters", "expected"),
    [
        (Filters.from_lists(ratios=["edge"]), 1 * 2 * 2 + 0 + 2),
        (Filters.from_lists(sizes=["small"]), 3 * 1 * 2 + 0 + 0),
        (Filters.from_lists(formats=["png"]), 3 * 2 * 1 + 1 + 1),
        (Filters.from_lists(["platform"], ["tiny"], ["jpeg"]), 2 * 1 * 1 + 1 + 0),
    ],
)
def test_filters_limit_jobs(small_config: GeneratorConfig, tmp_path: Path, filters: Filters, expected: int) -> None:
    assert len(build_jobs(small_config, filters, tmp_path)) == expected


def test_build_is_deterministic(small_config: GeneratorConfig, tmp_path: Path) -> None:
    first = build_jobs(small_config, Filters(), tmp_path)
    second = build_jobs(small_config, Filters(), tmp_path)

    assert first == second


def test_duplicate_ratio_across_presets_keeps_paths_unique(tmp_path: Path) -> None:
    config = GeneratorConfig.from_dict(
        _minimal_dict(presets={"platform": {"ratios": ["1:1", "2:3"]}, "common": {"ratios": ["1:1", "16:9"]}})
    )

    jobs = build_jobs(config, Filters(), tmp_path)
    paths = [job.output_path for job in jobs]

    assert len(paths) == len(set(paths))
    assert len(jobs) == 3
    square = [job for job in jobs if job.ratio == "1:1"]
    assert [job.category for job in square] == ["platform"]


def test_invalid_preset_ratio_aborts_build(tmp_path: Path) -> None:
    config = GeneratorConfig.from_dict(_minimal_dict(presets={"broken": {"ratios": ["1:1", "3x2"]}}))

    with pytest.raises(BuildError, match="broken"):
        SpecBuilder(config, Filters(), tmp_path).build()


def test_invalid_target_ratio_aborts_build(tmp_path: Path) -> None:
    config = GeneratorConfig.from_dict(
        _minimal_dict(targets={"BROKEN_TARGET": {"dimensions": [10, 10], "ratio": "a:b"}})
    )

    with pytest.raises(BuildError, match="BROKEN_TARGET"):
        build_jobs(config, Filters(), tmp_path)


@pytest.mark.parametrize(
    ("qualities", "expected"),
    [([60, 82, 95], 82), ([95, 60, 82], 82), ([80, 90], 80), ([90, 80], 80), ([], 85), ([100], 100), ([85, 86], 85)],
)
def test_nearest_quality(qualities: list[int], expected: int) -> None:
    assert nearest_quality(qualities) == expected
