"""项目内使用的自定义异常定义。"""


class WatermarkError(Exception):
    """基础异常类型。"""


class InvalidConfigurationError(WatermarkError):
    """配置不合法时抛出。"""


class InitializationError(WatermarkError):
    """初始化阶段的致命错误（没有可处理的文件、水印图片无效等）。"""


class DirectoryCreationError(InitializationError):
    """输出目录无法创建。"""


class RenderError(WatermarkError):
    """水印渲染失败。"""


class CompositeError(WatermarkError):
    """水印合成或编码失败。"""
