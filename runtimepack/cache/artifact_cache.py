"""运行时制品缓存门面

包装下载缓存协作者，把其任何失败统一转换为 FetchError（保留原始信息）。
调用方代码块内部抛出的异常（如解压失败）原样透传，句柄在所有退出路径上关闭。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from typing import IO

from runtimepack.core.exceptions import FetchError
from runtimepack.core.protocols import ArtifactStore

logger = logging.getLogger(__name__)


class ArtifactCache:
    """制品缓存 - 按 URI 复用已下载的运行时包"""

    def __init__(self, store: ArtifactStore) -> None:
        self._store = store

    @contextmanager
    def fetch(self, uri: str, sha256: str = "") -> Iterator[IO[bytes]]:
        """获取制品内容流

        用法:
            with cache.fetch(descriptor.uri) as stream:
                installer.extract(stream, target)
        """
        with ExitStack() as stack:
            try:
                stream = stack.enter_context(self._store.get(uri, sha256))
            except FetchError:
                raise
            except Exception as e:  # noqa: BLE001
                logger.error("制品获取失败: %s (%s)", uri, e)
                raise FetchError(f"获取制品失败 {uri}: {e}") from e
            yield stream
