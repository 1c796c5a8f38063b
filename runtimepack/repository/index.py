"""版本索引

制品仓库根目录下放置 index.yml，内容为版本到下载地址的映射:

    3.2.0: https://repo.example.com/mono/posix_like/mono-3.2.0.tar.gz
    3.2.3:
      uri: https://repo.example.com/mono/posix_like/mono-3.2.3.tar.gz
      sha256: 5f1c...

find_item 返回 (版本, uri, sha256)，前两项即版本索引协议要求的 (版本, uri)。
"""

from __future__ import annotations

import logging
from typing import Any

from runtimepack.core.config import Config
from runtimepack.core.exceptions import ConfigError, VersionResolutionError
from runtimepack.core.models import Platform
from runtimepack.core.protocols import ArtifactStore
from runtimepack.core.version import RuntimeVersion, resolve_version
from runtimepack.utils.yaml_io import load_yaml_stream

logger = logging.getLogger(__name__)

INDEX_FILE = "index.yml"


def parse_index(data: Any, *, source: str = "index") -> dict[RuntimeVersion, tuple[str, str]]:
    """解析索引映射为 {版本: (uri, sha256)}，格式不合法时抛 VersionResolutionError"""
    if not isinstance(data, dict):
        raise VersionResolutionError(
            f"{source} 格式错误: 应为版本映射，实际为 {type(data).__name__}"
        )
    entries: dict[RuntimeVersion, tuple[str, str]] = {}
    for raw_version, item in data.items():
        version = RuntimeVersion.parse(str(raw_version))
        if isinstance(item, str):
            uri, sha256 = item, ""
        elif isinstance(item, dict) and item.get("uri"):
            uri, sha256 = str(item["uri"]), str(item.get("sha256", ""))
        else:
            raise VersionResolutionError(f"{source} 中版本 {raw_version} 缺少 uri")
        if version in entries:
            raise VersionResolutionError(f"{source} 中版本 {raw_version} 重复")
        entries[version] = (uri, sha256)
    return entries


class StaticIndex:
    """内存中的静态版本索引（离线构建 / 内联配置）"""

    def __init__(self, items: dict[str, dict[str, Any]]) -> None:
        self._items = items

    def find_item(
        self, runtime_id: str, constraint: str | None,
    ) -> tuple[RuntimeVersion, str, str]:
        if runtime_id not in self._items:
            raise VersionResolutionError(f"索引中没有运行时 '{runtime_id}'")
        entries = parse_index(self._items[runtime_id], source=f"{runtime_id} 内联索引")
        version = resolve_version(entries, constraint)
        uri, sha256 = entries[version]
        return version, uri, sha256


class RepositoryIndex:
    """远程仓库版本索引，通过下载缓存读取 <repository_root>/index.yml"""

    def __init__(
        self,
        store: ArtifactStore,
        config: Config,
        platform: Platform = Platform.POSIX_LIKE,
    ) -> None:
        self._store = store
        self._config = config
        self._platform = platform

    def index_uri(self, runtime_id: str) -> str:
        root = self._config.runtime(runtime_id).repository_root
        if not root:
            raise ConfigError(f"运行时 '{runtime_id}' 未配置 repository_root")
        root = root.replace("{platform}", self._platform.value)
        return f"{root.rstrip('/')}/{INDEX_FILE}"

    def find_item(
        self, runtime_id: str, constraint: str | None,
    ) -> tuple[RuntimeVersion, str, str]:
        runtime = self._config.runtime(runtime_id)
        if runtime.versions:
            return StaticIndex({runtime_id: runtime.versions}).find_item(
                runtime_id, constraint,
            )

        uri = self.index_uri(runtime_id)
        logger.info("读取版本索引: %s", uri)
        with self._store.get(uri, refresh=True) as stream:
            data = load_yaml_stream(stream)
        entries = parse_index(data, source=uri)
        version = resolve_version(entries, constraint)
        item_uri, sha256 = entries[version]
        return version, item_uri, sha256
