"""输出目录管理与图像编码写入。"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from PIL import Image

from image_testkit.core.builder import CATEGORY_DIRS
from image_testkit.core.exceptions import ImageTestkitError, RenderError

LOGGER = logging.getLogger(__name__)

SUPPORTED_FORMATS = {
    "jpeg": "JPEG",
    "jpg": "JPEG",
    "png": "PNG",
    "webp": "WEBP",
}


class ImageWriteError(RenderError):
    """输出写入失败。"""


class OutputManager:
    """负责输出根目录的初始化、清理与文件信息查询。"""

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir).resolve()

    def ensure_structure(self) -> list[Path]:
        """创建三个顶层分类目录，可重复调用。"""

        created: list[Path] = []
        for name in CATEGORY_DIRS:
            directory = self.base_dir / name
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ImageTestkitError(f"无法创建目录: {directory}") from exc
            created.append(directory)
        return created

    def clean(self) -> None:
        """清空输出目录内容但保留目录本身。"""

        if not self.base_dir.exists():
            return

        for entry in self.base_dir.iterdir():
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as exc:
                raise ImageTestkitError(f"无法删除: {entry}") from exc
        LOGGER.info("已清空输出目录：%s", self.base_dir)

    @staticmethod
    def file_size(path: Path) -> int:
        return Path(path).stat().st_size


def ensure_directory_structure(base_dir: Path) -> list[Path]:
    return OutputManager(base_dir).ensure_structure()


def save_image(image: Image.Image, destination: Path, image_format: str, quality: int) -> None:
    """按格式与质量将 PIL Image 编码写入磁盘，自动创建父目录。"""

    pil_format = SUPPORTED_FORMATS.get(image_format.lower())
    if not pil_format:
        raise ImageWriteError(f"不支持的输出格式: {image_format}")

    save_params: dict = {}
    image_to_save = image
    if pil_format == "JPEG":
        save_params.update(quality=quality, optimize=True)
        if image.mode != "RGB":
            image_to_save = image.convert("RGB")
    elif pil_format == "WEBP":
        save_params.update(quality=quality, lossless=False)
    else:
        save_params.update(optimize=True)
        if image.mode not in {"RGB", "RGBA"}:
            image_to_save = image.convert("RGB")

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        image_to_save.save(destination, format=pil_format, **save_params)
    except (OSError, KeyError, ValueError) as exc:
        raise ImageWriteError(f"写入文件失败: {destination}") from exc
