"""版本索引与版本解析模块

拆分说明:
- index.py: 版本索引（远程仓库 index.yml / 内联静态索引）
- resolver.py: 版本解析器，统一错误类型
"""

from runtimepack.repository.index import RepositoryIndex, StaticIndex, parse_index
from runtimepack.repository.resolver import VersionResolver

__all__ = [
    "RepositoryIndex",
    "StaticIndex",
    "VersionResolver",
    "parse_index",
]
