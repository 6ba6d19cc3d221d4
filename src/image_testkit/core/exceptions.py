"""项目内使用的自定义异常定义。"""


class ImageTestkitError(Exception):
    """基础异常类型。"""


class ConfigError(ImageTestkitError):
    """配置缺失或不合法时抛出。"""


class InvalidRatioError(ConfigError):
    """比例字符串无法解析。"""


class FilterError(ImageTestkitError):
    """筛选条件引用了配置中不存在的分类或格式。"""


class BuildError(ImageTestkitError):
    """构建任务列表失败，不返回部分结果。"""


class RenderError(ImageTestkitError):
    """单个任务绘制或编码失败。"""


class EmptyInputError(ImageTestkitError):
    """提交给调度器的任务列表为空。"""


class OrchestratorStateError(ImageTestkitError):
    """调度器状态不允许当前操作。"""


class GenerationFailedError(ImageTestkitError):
    """部分任务失败的汇总错误（非致命）。"""

    def __init__(self, failed: int, total: int) -> None:
        super().__init__(f"{failed}/{total} 张图片生成失败")
        self.failed = failed
        self.total = total
