"""版本解析器

查询版本索引协作者，返回满足约束的最高版本及其下载地址。
索引的任何失败都包装为 VersionResolutionError，错误信息与原因一字不差，
便于排查上游索引问题。结果不缓存，detect 与 compile 各自独立解析。
"""

from __future__ import annotations

import logging

from runtimepack.core.exceptions import VersionResolutionError
from runtimepack.core.models import ArtifactDescriptor
from runtimepack.core.protocols import VersionIndex

logger = logging.getLogger(__name__)


class VersionResolver:
    """版本解析器 - 只读，不产生副作用"""

    def __init__(self, index: VersionIndex) -> None:
        self._index = index

    def resolve(
        self, runtime_id: str, version_constraint: str | None = None,
    ) -> ArtifactDescriptor:
        try:
            version, uri, *rest = self._index.find_item(runtime_id, version_constraint)
        except VersionResolutionError:
            raise
        except Exception as e:  # noqa: BLE001
            raise VersionResolutionError(str(e)) from e

        sha256 = rest[0] if rest else ""
        logger.info(
            "版本解析: %s (约束=%s) -> %s", runtime_id, version_constraint or "+", version,
        )
        return ArtifactDescriptor(version=version, uri=uri, sha256=sha256)
