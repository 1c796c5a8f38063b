"""领域协议定义

集中定义运行时模块依赖的外部协作者接口（Protocol），
MonoRuntime 只依赖这些抽象，通过构造函数注入，
测试时替换为假实现即可，无需全局 patch。

使用 typing.Protocol 而非 ABC，使得现有类无需修改继承关系即可满足协议。
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import IO, Protocol

from runtimepack.core.models import Platform
from runtimepack.core.version import RuntimeVersion


# =========================================================================
# 版本索引协议
# =========================================================================

class VersionIndex(Protocol):
    """版本索引协议 — 只读查询

    返回 (版本, 下载地址)；实现方的任何异常都会被 VersionResolver
    原样包装进 VersionResolutionError。
    """

    def find_item(
        self, runtime_id: str, constraint: str | None,
    ) -> tuple[RuntimeVersion, str]:
        ...


# =========================================================================
# 下载缓存协议
# =========================================================================

class ArtifactStore(Protocol):
    """下载缓存协议: 按 URI 缓存，作用域内获取文件句柄

    with store.get(uri) as stream:
        ...   # 退出 with 时句柄一定被关闭

    refresh=True 表示内容可能已变化，需重新获取；获取失败时可退回旧副本。
    """

    def get(
        self, uri: str, sha256: str = "", *, refresh: bool = False,
    ) -> AbstractContextManager[IO[bytes]]:
        ...


# =========================================================================
# 平台识别协议
# =========================================================================

class PlatformDetector(Protocol):
    """平台识别协议 — 报告当前构建的目标平台"""

    def __call__(self) -> Platform:
        ...
