"""集中配置管理

提供统一的配置入口：缓存目录 + 各运行时的版本约束与制品仓库地址。
支持从 YAML 文件加载 + 编程式覆盖。

配置示例 (configs/default.yml):

    cache_dir: deps/cache
    runtimes:
      mono:
        version: "3.2.+"
        repository_root: "https://repo.example.com/mono/{platform}"
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from runtimepack.core.exceptions import ConfigError
from runtimepack.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "configs/default.yml"

# 证书同步 (mozroots) 使用的 Mozilla 根证书列表
DEFAULT_TRUST_STORE_URL = (
    "http://hg.mozilla.org/releases/mozilla-release/raw-file/default/"
    "security/nss/lib/ckfw/builtins/certdata.txt"
)


@dataclass
class RuntimeConfig:
    """单个运行时的配置"""

    name: str
    version: str = "+"
    repository_root: str = ""
    link_root: str = "/app"  # 运行时构建时写死的安装前缀
    trust_store_url: str = DEFAULT_TRUST_STORE_URL
    versions: dict[str, Any] = field(default_factory=dict)  # 内联版本索引（离线）

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> RuntimeConfig:
        known = {f for f in cls.__dataclass_fields__ if f != "name"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"运行时 '{name}' 存在未知配置项: {unknown}")
        values = dict(data)
        if "version" in values:
            values["version"] = str(values["version"])
        if not isinstance(values.get("versions", {}), dict):
            raise ConfigError(f"运行时 '{name}' 的 versions 必须是映射")
        return cls(name=name, **values)


@dataclass
class Config:
    """框架全局配置"""

    cache_dir: str = "deps/cache"
    runtimes: dict[str, dict[str, Any]] = field(default_factory=dict)

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_PATH) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known and k != "extra"}
        extra = {k: v for k, v in data.items() if k not in known}
        runtimes = matched.get("runtimes") or {}
        if not isinstance(runtimes, dict):
            raise ConfigError(f"{path}: runtimes 必须是映射")
        matched["runtimes"] = runtimes
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def runtime(self, name: str) -> RuntimeConfig:
        """获取指定运行时的配置，未配置时返回默认值"""
        return RuntimeConfig.from_dict(name, self.runtimes.get(name) or {})

    def to_dict(self) -> dict:
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_PATH) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
