"""制品缓存模块

拆分说明:
- download_cache.py: 按 URI 落盘的下载缓存（外部协作者的默认实现）
- artifact_cache.py: 运行时模块使用的缓存门面，统一错误类型
"""

from runtimepack.cache.artifact_cache import ArtifactCache
from runtimepack.cache.download_cache import DownloadCache

__all__ = [
    "ArtifactCache",
    "DownloadCache",
]
