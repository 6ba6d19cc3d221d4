"""内置默认配置。"""

from __future__ import annotations

DEFAULT_CONFIG = {
    "version": "1.0.0",
    "presets": {
        "platform": {
            "description": "平台推荐比例",
            "ratios": ["2:3", "4:5", "1:1", "9:16", "1.91:1"],
        },
        "common": {
            "description": "常见照片比例",
            "ratios": ["3:2", "4:3", "16:9", "5:4", "21:9"],
        },
        "edge": {
            "description": "极端比例",
            "ratios": ["1:2", "2:1", "1:3", "3:1"],
        },
    },
    "sizes": {
        "tiny": {"description": "缩略图级别", "base_sizes": [100, 150, 200]},
        "small": {"description": "移动端预览", "base_sizes": [500, 640, 800]},
        "medium": {"description": "常规社交平台尺寸", "base_sizes": [1000, 1080, 1200, 1500]},
        "large": {"description": "高清", "base_sizes": [2000, 2160, 3000]},
        "xlarge": {"description": "超高清", "base_sizes": [4000, 4096, 5000]},
    },
    "formats": {
        "jpeg": {"qualities": [60, 82, 95], "mime_type": "image/jpeg", "extension": ".jpg"},
        "png": {"qualities": [95], "mime_type": "image/png", "extension": ".png"},
        "webp": {"qualities": [82, 90], "mime_type": "image/webp", "extension": ".webp"},
    },
    "targets": {
        "PINTEREST_2_3": {
            "platform": "Pinterest",
            "dimensions": [1000, 1500],
            "ratio": "2:3",
            "description": "Pinterest 标准 Pin",
        },
        "IG_FEED_4_5": {
            "platform": "Instagram",
            "dimensions": [1080, 1350],
            "ratio": "4:5",
            "description": "Instagram 竖版动态",
        },
        "IG_FEED_1_1": {
            "platform": "Instagram",
            "dimensions": [1080, 1080],
            "ratio": "1:1",
            "description": "Instagram 方形动态",
        },
        "IG_STORY": {
            "platform": "Instagram",
            "dimensions": [1080, 1920],
            "ratio": "9:16",
            "description": "Instagram 快拍",
        },
        "TIKTOK_9_16": {
            "platform": "TikTok",
            "dimensions": [1080, 1920],
            "ratio": "9:16",
            "description": "TikTok 竖屏视频封面",
        },
        "LI_1_1": {
            "platform": "LinkedIn",
            "dimensions": [1200, 1200],
            "ratio": "1:1",
            "description": "LinkedIn 方形帖子",
        },
        "LI_1_91_1": {
            "platform": "LinkedIn",
            "dimensions": [1200, 628],
            "ratio": "1.91:1",
            "description": "LinkedIn 链接分享图",
        },
    },
    "edge_cases": [
        {"name": "single_pixel", "dimensions": [1, 1], "description": "最小可能尺寸"},
        {"name": "tiny_square", "dimensions": [16, 16], "description": "图标级别"},
        {"name": "extreme_wide", "dimensions": [4000, 100], "description": "40:1 横幅"},
        {"name": "extreme_tall", "dimensions": [100, 4000], "description": "1:40 长图"},
        {"name": "odd_dimensions", "dimensions": [1023, 767], "description": "奇数宽高"},
        {"name": "xga_4_3", "dimensions": [1024, 768], "description": "传统 4:3 分辨率"},
        {"name": "huge_square", "dimensions": [6000, 6000], "description": "超大方图"},
    ],
}
