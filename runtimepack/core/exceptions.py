"""统一异常体系

所有业务异常继承 RuntimePackError，替代散落的 ValueError / RuntimeError。
CLI 层可据此输出友好提示并返回非零退出码。

各阶段失败时立即抛出，原始错误信息原样保留（不替换为通用提示），
内部不做任何重试，由外层编排器决定是否重新构建。
"""

from __future__ import annotations


class RuntimePackError(Exception):
    """runtimepack 基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(RuntimePackError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(RuntimePackError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class VersionResolutionError(RuntimePackError):
    """版本索引不可达、格式错误，或没有满足约束的版本"""

    code = "VERSION_RESOLUTION_ERROR"


class VersionFormatError(VersionResolutionError):
    """版本号或版本约束无法解析"""

    code = "VERSION_FORMAT_ERROR"


class FetchError(RuntimePackError):
    """制品下载失败或完整性校验失败"""

    code = "FETCH_ERROR"


class ExtractionError(RuntimePackError):
    """压缩包损坏/截断，或写入文件系统失败"""

    code = "EXTRACTION_ERROR"


class DetectionError(RuntimePackError):
    """detect 阶段失败（包装 VersionResolutionError 并附加上下文）"""

    code = "DETECTION_ERROR"


class CompositionError(RuntimePackError):
    """环境组装失败（组装是纯函数，出现即为调用方传入了非法参数）"""

    code = "COMPOSITION_ERROR"


class CommandError(RuntimePackError):
    """外部命令返回非零退出码"""

    code = "COMMAND_ERROR"

    def __init__(self, message: str, returncode: int = -1) -> None:
        super().__init__(message)
        self.returncode = returncode
