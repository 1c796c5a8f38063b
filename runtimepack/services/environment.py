"""release 环境组装

纯函数: 不访问网络、不读写文件、不修改进程全局状态。
所有路径都以 $HOME 记号表示（应用部署后的根目录），
产物迁移到运行主机后依然有效。

路径类变量只给出运行时自身的目录，消费方（进程管理器）负责
把它们前置合并到已有同名变量之前，见 ReleaseDescriptor.merged_env。
"""

from __future__ import annotations

import logging
from pathlib import Path

from runtimepack.core.exceptions import CompositionError
from runtimepack.core.models import (
    InstalledLayout,
    Platform,
    ReleaseDescriptor,
    StartScript,
)

logger = logging.getLogger(__name__)

HOME_TOKEN = "$HOME"
CONFIG_HOME = f"{HOME_TOKEN}/.config"

# 标准系统目录，顺序固定
SYSTEM_PATHS: dict[Platform, tuple[str, ...]] = {
    Platform.POSIX_LIKE: (
        "/usr/local/sbin", "/usr/local/bin", "/usr/sbin", "/usr/bin", "/sbin", "/bin",
    ),
}

# 动态链接器的后备库路径变量
LOADER_FALLBACK_VARS: dict[Platform, str] = {
    Platform.POSIX_LIKE: "DYLD_LIBRARY_FALLBACK_PATH",
}

# 并行标记清除 + 堆上限
GC_PARAMS = "major=marksweep-par,max-heap-size=464M"

SERVER_FLAG = "--server"


def system_paths(platform: Platform) -> tuple[str, ...]:
    """平台标准可执行目录，未支持的平台抛 CompositionError"""
    try:
        return SYSTEM_PATHS[platform]
    except KeyError:
        raise CompositionError(f"平台 {platform.value} 没有可用的默认路径") from None


def loader_fallback_var(platform: Platform) -> str:
    try:
        return LOADER_FALLBACK_VARS[platform]
    except KeyError:
        raise CompositionError(f"平台 {platform.value} 没有动态链接器后备变量") from None


class EnvironmentComposer:
    """运行时环境变量与启动脚本组装器"""

    def __init__(self, runtime_name: str, *, server_mode: bool = True) -> None:
        self.runtime_name = runtime_name
        self.server_mode = server_mode

    @property
    def gc_var(self) -> str:
        return f"{self.runtime_name.upper()}_GC_PARAMS"

    def runtime_command(self, home: str) -> str:
        cmd = f"{home}/bin/{self.runtime_name}"
        return f"{cmd} {SERVER_FLAG}" if self.server_mode else cmd

    def compose(
        self,
        app_dir: str | Path,
        layout: InstalledLayout,
        platform: Platform,
        start_script: StartScript | None = None,
    ) -> ReleaseDescriptor:
        paths = system_paths(platform)
        fallback_var = loader_fallback_var(platform)

        try:
            rel = layout.relative_root(Path(app_dir))
        except ValueError:
            raise CompositionError(
                f"运行时目录 {layout.root} 不在应用目录 {app_dir} 之下"
            ) from None

        home = f"{HOME_TOKEN}/{rel}"
        lib = f"{home}/lib"
        command = self.runtime_command(home)

        env: dict[str, str] = {
            "LD_LIBRARY_PATH": lib,
            fallback_var: lib,
            "C_INCLUDE_PATH": f"{home}/include",
            "ACLOCAL_PATH": f"{home}/share/aclocal",
            "PKG_CONFIG_PATH": f"{lib}/pkgconfig",
            "PATH": ":".join((f"{home}/bin", *paths)),
            "RUNTIME_COMMAND": command,
            self.gc_var: GC_PARAMS,
            "XDG_CONFIG_HOME": CONFIG_HOME,
        }

        # 未指定运行命令时启动运行时本身
        if start_script is None:
            start_script = StartScript()
        script = StartScript(init=list(start_script.init), run=start_script.run or command)

        logger.debug("release 环境已组装: %s (%d 个变量)", self.runtime_name, len(env))
        return ReleaseDescriptor(env=env, start_script=script, runtime_command=command)
