"""核心数据模型

所有核心数据类集中定义，各阶段统一从此处导入:
Platform / LifecycleState / ArtifactDescriptor / InstalledLayout /
StartScript / ReleaseDescriptor。
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from runtimepack.core.version import RuntimeVersion

SHEBANG = "#!/usr/bin/env bash"

# 路径类变量: 与已有同名变量合并时前置，而不是替换
PATH_STYLE_VARS = frozenset((
    "PATH",
    "LD_LIBRARY_PATH",
    "DYLD_LIBRARY_FALLBACK_PATH",
    "C_INCLUDE_PATH",
    "ACLOCAL_PATH",
    "PKG_CONFIG_PATH",
))


# =========================================================================
# 枚举
# =========================================================================


class Platform(str, Enum):
    """构建目标平台（封闭集合，分支处理须穷举）"""

    POSIX_LIKE = "posix_like"
    WINDOWS_LIKE = "windows_like"


class LifecycleState(str, Enum):
    """运行时模块生命周期状态"""

    UNINITIALIZED = "uninitialized"
    DETECTING = "detecting"
    APPLICABLE = "applicable"
    NOT_APPLICABLE = "not_applicable"
    COMPILING = "compiling"
    COMPILED = "compiled"
    RELEASING = "releasing"
    RELEASED = "released"
    FAILED = "failed"


# =========================================================================
# 版本解析 / 安装产物
# =========================================================================


@dataclass(frozen=True)
class ArtifactDescriptor:
    """已解析的制品: 版本 + 下载地址（可选 sha256 校验和）"""

    version: RuntimeVersion
    uri: str
    sha256: str = ""


@dataclass(frozen=True)
class InstalledLayout:
    """解压后的运行时目录: <app_dir>/vendor/<runtime>/"""

    runtime_name: str
    root: Path

    @property
    def bin_dir(self) -> Path:
        return self.root / "bin"

    @property
    def lib_dir(self) -> Path:
        return self.root / "lib"

    @property
    def include_dir(self) -> Path:
        return self.root / "include"

    @property
    def executable(self) -> Path:
        return self.bin_dir / self.runtime_name

    def relative_root(self, app_dir: Path) -> str:
        """相对应用根目录的路径（如 vendor/mono），用于拼接 $HOME 记号"""
        return self.root.relative_to(app_dir).as_posix()

    def is_valid(self) -> bool:
        exe = self.executable
        return exe.is_file() and os.access(exe, os.X_OK)


# =========================================================================
# release 产物
# =========================================================================


@dataclass
class StartScript:
    """启动脚本: 若干初始化命令 + 最后一条运行命令（纯顺序文本，无分支）"""

    init: list[str] = field(default_factory=list)
    run: str = ""

    def render(self) -> str:
        lines = [SHEBANG, *self.init, self.run]
        return "".join(f"{line}\n" for line in lines)


@dataclass
class ReleaseDescriptor:
    """release 阶段结果: 有序环境变量 + 启动脚本，每次 release 重新构造"""

    env: dict[str, str]
    start_script: StartScript
    runtime_command: str = ""

    def merged_env(self, existing: Mapping[str, str]) -> dict[str, str]:
        """与已有环境合并: 路径类变量前置拼接，其余变量覆盖"""
        merged = dict(existing)
        for name, value in self.env.items():
            prior = existing.get(name, "")
            if name in PATH_STYLE_VARS and prior:
                merged[name] = f"{value}:{prior}"
            else:
                merged[name] = value
        return merged

    @property
    def script_body(self) -> str:
        return self.start_script.render()

    def to_dict(self) -> dict:
        return {
            "runtime_command": self.runtime_command,
            "config_vars": dict(self.env),
            "start_script": {
                "init": list(self.start_script.init),
                "run": self.start_script.run,
            },
        }
