"""测试图片绘制：网格背景、边框、居中文字与四角标记。"""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from image_testkit.core.models import RenderJob
from image_testkit.utils.colors import RGB, category_color

LOGGER = logging.getLogger(__name__)

WHITE: RGB = (255, 255, 255)
BLACK: RGB = (0, 0, 0)
GRID_OPACITY = 0.2
BORDER_THICKNESS = 2
CORNER_OFFSET = 10
CORNER_FONT_SIZE = 12


def font_size_for(width: int, height: int) -> int:
    """按最大边选择文字字号。"""

    max_dim = max(width, height)
    if max_dim <= 200:
        return 10
    if max_dim <= 800:
        return 14
    if max_dim <= 1500:
        return 18
    if max_dim <= 3000:
        return 24
    return 32


def grid_size_for(width: int, height: int) -> int:
    """按最大边选择网格间距，小图使用更密的网格。"""

    max_dim = max(width, height)
    if max_dim <= 200:
        return 20
    if max_dim <= 500:
        return 50
    if max_dim <= 1000:
        return 75
    return 100


def overlay_lines(job: RenderJob) -> list[str]:
    return [
        f"{job.width}×{job.height}",
        f"{job.ratio} ({job.ratio_decimal:.3f})",
        f"{job.format} Q{job.quality}",
        job.size_category,
    ]


def render_image(job: RenderJob, palette: Mapping[str, str]) -> Image.Image:
    """根据任务绘制一张 RGB 图片，配色表只读使用。"""

    color = category_color(palette, job.category)
    image = draw_grid_background(job.width, job.height, color)
    draw = ImageDraw.Draw(image)
    draw_border(draw, job.width, job.height, color, BORDER_THICKNESS)
    draw_text_overlay(draw, overlay_lines(job), job.width, job.height)
    draw_corner_markers(draw, job.width, job.height)
    return image


def draw_grid_background(width: int, height: int, color: RGB) -> Image.Image:
    """以分类颜色填充背景，并叠加 20% 不透明度的白色网格线。"""

    canvas = np.empty((height, width, 3), dtype=np.uint8)
    canvas[:, :] = color

    step = grid_size_for(width, height)
    line = np.array(color, dtype=np.float32) * (1 - GRID_OPACITY) + np.array(WHITE, dtype=np.float32) * GRID_OPACITY
    line_color = np.round(line).astype(np.uint8)
    canvas[:, step::step] = line_color
    canvas[step::step, :] = line_color
    return Image.fromarray(canvas)


def draw_border(draw: ImageDraw.ImageDraw, width: int, height: int, color: RGB, thickness: int) -> None:
    draw.rectangle((0, 0, width - 1, height - 1), outline=color, width=thickness)


def draw_text_overlay(draw: ImageDraw.ImageDraw, lines: Sequence[str], width: int, height: int) -> None:
    """逐行居中绘制带描边的说明文字。"""

    size = font_size_for(width, height)
    font = ImageFont.load_default(size=size)
    line_height = int(size * 1.5)
    start_y = (height - len(lines) * line_height) // 2

    for index, line in enumerate(lines):
        left, _, right, _ = draw.textbbox((0, 0), line, font=font, stroke_width=1)
        x = (width - (right - left)) // 2
        y = start_y + index * line_height
        draw.text((x, y), line, font=font, fill=WHITE, stroke_width=1, stroke_fill=BLACK)


def draw_corner_markers(draw: ImageDraw.ImageDraw, width: int, height: int) -> None:
    """在四角绘制 TL/TR/BL/BR 标记，便于检查裁剪与旋转。"""

    font = ImageFont.load_default(size=CORNER_FONT_SIZE)
    for label, anchor, position in (
        ("TL", "la", (CORNER_OFFSET, CORNER_OFFSET)),
        ("TR", "ra", (width - CORNER_OFFSET, CORNER_OFFSET)),
        ("BL", "ld", (CORNER_OFFSET, height - CORNER_OFFSET)),
        ("BR", "rd", (width - CORNER_OFFSET, height - CORNER_OFFSET)),
    ):
        draw.text(position, label, font=font, anchor=anchor, fill=WHITE, stroke_width=1, stroke_fill=BLACK)
