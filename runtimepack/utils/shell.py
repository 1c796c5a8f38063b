"""Shell 命令执行工具 — 统一子进程调用

通过 CommandExecutor 协议抽象子进程执行，方便测试替换。
compile 阶段的软链接、证书同步等后置命令都经由此处执行。
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Protocol

from runtimepack.core.exceptions import CommandError

logger = logging.getLogger(__name__)


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议 — 抽象子进程调用

    测试时可注入假实现记录命令与环境变量，无需 patch subprocess。
    """

    def execute(
        self,
        cmd: str,
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        """执行命令并返回结果"""
        ...


# =========================================================================
# 默认实现: 本地执行器
# =========================================================================

class LocalExecutor:
    """本地命令执行器（默认实现）

    env 原样传给子进程，不经过 shell，因此值中的 $HOME 等记号不会被展开。
    """

    def execute(
        self,
        cmd: str,
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        try:
            r = subprocess.run(
                shlex.split(cmd), capture_output=True, text=True,
                cwd=cwd, env=env, check=False, timeout=timeout,
            )
        except FileNotFoundError as e:
            return CommandResult(returncode=127, stderr=str(e))
        except OSError as e:
            # 与 shell 约定一致: 不可执行等启动失败为 126
            return CommandResult(returncode=126, stderr=str(e))
        except subprocess.TimeoutExpired:
            return CommandResult(returncode=-1, stderr=f"命令超时 ({timeout}s)")
        return CommandResult(
            returncode=r.returncode,
            stdout=r.stdout,
            stderr=r.stderr,
        )


def run_command(
    executor: CommandExecutor,
    cmd: str,
    *,
    cwd: str = ".",
    env: dict[str, str] | None = None,
    label: str = "cmd",
) -> CommandResult:
    """执行命令，非零退出码时抛 CommandError

    Args:
        executor: 命令执行器
        cmd: 命令字符串
        cwd: 工作目录
        env: 环境变量（不传则继承当前进程）
        label: 日志标签
    """
    logger.info("  %s: %s (cwd=%s)", label, cmd, cwd)
    r = executor.execute(cmd, cwd=cwd, env=env)
    if not r.success:
        raise CommandError(
            f"{label}失败 (rc={r.returncode}): {r.stderr[:500]}",
            returncode=r.returncode,
        )
    return r
