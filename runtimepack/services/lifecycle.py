"""运行时生命周期管理 (detect → compile → release)

状态流转:
  uninitialized → detecting → (applicable | not_applicable)
                → compiling → compiled → releasing → released
  任一进行中的状态失败 → failed

- detect:  平台不支持时直接返回 None（不访问网络，不算失败），
           否则解析版本并返回 "<runtime>-<version>"
- compile: 重新解析版本 → 下载缓存 → 解压到 vendor/<runtime> →
           vendor 软链接 → 证书同步 (mozroots)，任一步失败立即抛出
- release: 组装环境变量与启动脚本，写出 <app_dir>/start.sh

外部协作者（版本解析、下载缓存、命令执行、平台识别）均通过构造函数注入，
未注入时按全局配置构造默认实现。
"""

from __future__ import annotations

import logging
import shlex
import time
from pathlib import Path

from runtimepack.cache import ArtifactCache, DownloadCache
from runtimepack.core.config import Config, RuntimeConfig, get_config
from runtimepack.core.exceptions import DetectionError, VersionResolutionError
from runtimepack.core.models import (
    InstalledLayout,
    LifecycleState,
    Platform,
    ReleaseDescriptor,
    StartScript,
)
from runtimepack.core.protocols import PlatformDetector
from runtimepack.repository import RepositoryIndex, VersionResolver
from runtimepack.services.environment import CONFIG_HOME, EnvironmentComposer, system_paths
from runtimepack.services.installer import Installer
from runtimepack.services.platform import detect_platform
from runtimepack.utils.shell import CommandExecutor, LocalExecutor, run_command
from runtimepack.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)

START_SCRIPT = "start.sh"


class MonoRuntime:
    """Mono 运行时模块"""

    NAME = "mono"
    SUPPORTED_PLATFORMS = frozenset({Platform.POSIX_LIKE})

    def __init__(
        self,
        app_dir: str | Path,
        *,
        config: Config | None = None,
        resolver: VersionResolver | None = None,
        cache: ArtifactCache | None = None,
        executor: CommandExecutor | None = None,
        platform_detector: PlatformDetector | None = None,
        start_script: StartScript | None = None,
    ) -> None:
        self.app_dir = Path(app_dir)
        self._config = config or get_config()
        self._platform_detector = platform_detector or detect_platform
        self._resolver = resolver
        self._cache = cache
        self._download_cache: DownloadCache | None = None
        self._executor = executor or LocalExecutor()
        self._start_script = start_script
        self._installer = Installer(self.NAME)
        self._composer = EnvironmentComposer(self.NAME)
        self.state = LifecycleState.UNINITIALIZED

    # ---- 协作者 ----

    @property
    def runtime_config(self) -> RuntimeConfig:
        return self._config.runtime(self.NAME)

    @property
    def vendor_dir(self) -> Path:
        return self.app_dir / "vendor" / self.NAME

    @property
    def layout(self) -> InstalledLayout:
        return InstalledLayout(runtime_name=self.NAME, root=self.vendor_dir)

    def _store(self) -> DownloadCache:
        if self._download_cache is None:
            self._download_cache = DownloadCache(self._config.cache_dir)
        return self._download_cache

    def _artifact_cache(self) -> ArtifactCache:
        if self._cache is None:
            self._cache = ArtifactCache(self._store())
        return self._cache

    def _version_resolver(self, platform: Platform) -> VersionResolver:
        if self._resolver is None:
            index = RepositoryIndex(self._store(), self._config, platform)
            self._resolver = VersionResolver(index)
        return self._resolver

    # ---- detect ----

    def detect(self) -> str | None:
        """返回检测标识 "mono-<version>"，平台不适用时返回 None"""
        self.state = LifecycleState.DETECTING
        try:
            detected = self._detect()
        except Exception:
            self.state = LifecycleState.FAILED
            raise
        self.state = (
            LifecycleState.NOT_APPLICABLE if detected is None else LifecycleState.APPLICABLE
        )
        return detected

    def _detect(self) -> str | None:
        platform = self._platform_detector()
        if platform not in self.SUPPORTED_PLATFORMS:
            logger.info("平台 %s 不支持 %s，跳过", platform.value, self.NAME)
            return None

        try:
            descriptor = self._version_resolver(platform).resolve(
                self.NAME, self.runtime_config.version,
            )
        except VersionResolutionError as e:
            raise DetectionError(f"Error finding {self.NAME} version: {e}") from e
        return f"{self.NAME}-{descriptor.version}"

    # ---- compile ----

    def compile(self) -> InstalledLayout:
        """安装运行时到 <app_dir>/vendor/mono 并同步证书"""
        self.state = LifecycleState.COMPILING
        try:
            layout = self._compile()
        except Exception:
            self.state = LifecycleState.FAILED
            raise
        self.state = LifecycleState.COMPILED
        return layout

    def _compile(self) -> InstalledLayout:
        platform = self._platform_detector()
        if platform not in self.SUPPORTED_PLATFORMS:
            raise DetectionError(f"{self.NAME} 不支持平台 {platform.value}")

        descriptor = self._version_resolver(platform).resolve(
            self.NAME, self.runtime_config.version,
        )

        start = time.monotonic()
        logger.info("安装 %s %s -> %s", self.NAME, descriptor.version, self.vendor_dir)
        with self._artifact_cache().fetch(descriptor.uri, descriptor.sha256) as stream:
            layout = self._installer.extract(stream, self.vendor_dir)
        logger.info("安装完成 (%.1fs)", time.monotonic() - start)

        self._link_vendor()
        self._sync_trust_store(layout, platform)
        return layout

    def _link_vendor(self) -> None:
        """把 vendor 目录链接到运行时构建时写死的前缀下"""
        link_root = self.runtime_config.link_root
        if not link_root or Path(link_root) == self.app_dir:
            return
        source = shlex.quote(f"{self.app_dir}/vendor")
        dest = shlex.quote(f"{link_root.rstrip('/')}/vendor")
        cmd = f"ln -sfn {source} {dest}"
        run_command(self._executor, cmd, cwd=str(self.app_dir), label="vendor 软链接")

    def _sync_trust_store(self, layout: InstalledLayout, platform: Platform) -> None:
        """导入 Mozilla 根证书；HOME 固定为应用目录，结果与构建主机无关"""
        env = {
            "HOME": str(self.app_dir),
            "XDG_CONFIG_HOME": CONFIG_HOME,
            "PATH": ":".join((str(layout.bin_dir), *system_paths(platform))),
            "LD_LIBRARY_PATH": str(layout.lib_dir),
        }
        cmd = (
            f"{shlex.quote(str(layout.bin_dir / 'mozroots'))} --import --sync --machine"
            f" --url {self.runtime_config.trust_store_url}"
        )
        run_command(self._executor, cmd, cwd=str(self.app_dir), env=env, label="mozroots")

    # ---- release ----

    def release(self) -> ReleaseDescriptor:
        """组装运行环境并写出 start.sh，不访问网络"""
        self.state = LifecycleState.RELEASING
        try:
            descriptor = self._composer.compose(
                self.app_dir, self.layout, self._platform_detector(),
                start_script=self._start_script,
            )
            atomic_write(self.app_dir / START_SCRIPT, descriptor.script_body, mode=0o755)
        except Exception:
            self.state = LifecycleState.FAILED
            raise
        self.state = LifecycleState.RELEASED
        logger.info("release 完成: %s", self.app_dir / START_SCRIPT)
        return descriptor
