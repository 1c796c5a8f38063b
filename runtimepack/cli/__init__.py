"""runtimepack 命令行接口

单个运行时模块的 detect / compile / release 入口，
多运行时的编排由外层构建系统负责。
"""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from runtimepack import __version__
from runtimepack.core.config import DEFAULT_CONFIG_PATH, get_config, init_config
from runtimepack.core.exceptions import RuntimePackError
from runtimepack.core.models import StartScript
from runtimepack.services.lifecycle import MonoRuntime
from runtimepack.utils.logger import setup_logging


def _runtime(app_dir: str, start_script: StartScript | None = None) -> MonoRuntime:
    """按全局配置构造运行时模块"""
    return MonoRuntime(Path(app_dir), config=get_config(), start_script=start_script)


@contextmanager
def _domain_errors() -> Iterator[None]:
    """业务异常转换为 click 错误输出（退出码 1）"""
    try:
        yield
    except RuntimePackError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=DEFAULT_CONFIG_PATH,
              show_default=True, help="配置文件路径")
def main(config_path: str) -> None:
    """runtimepack - 应用运行时供给 (detect / compile / release)"""
    setup_logging(
        level=os.getenv("RUNTIMEPACK_LOG_LEVEL", "INFO"),
        json_output=os.getenv("RUNTIMEPACK_LOG_JSON", "") == "1",
    )
    init_config(config_path)


# 注册各阶段子命令
from runtimepack.cli.cmd_lifecycle import register as _reg_lifecycle  # noqa: E402

_reg_lifecycle(main)
