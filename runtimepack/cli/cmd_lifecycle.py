"""CLI — 生命周期命令 (detect / compile / release)"""

from __future__ import annotations

import sys

import click

from runtimepack.cli import _domain_errors, _runtime
from runtimepack.core.models import StartScript
from runtimepack.utils.yaml_io import dump_yaml

_APP_DIR = click.Path(exists=True, file_okay=False, resolve_path=True)


def register(group: click.Group) -> None:
    group.add_command(detect)
    group.add_command(compile_cmd)
    group.add_command(release)


@click.command()
@click.argument("app_dir", type=_APP_DIR)
def detect(app_dir: str) -> None:
    """检测是否需要该运行时，输出标识（不适用时退出码为 1）"""
    with _domain_errors():
        detected = _runtime(app_dir).detect()
    if detected is None:
        click.echo("no")
        sys.exit(1)
    click.echo(detected)


@click.command(name="compile")
@click.argument("app_dir", type=_APP_DIR)
def compile_cmd(app_dir: str) -> None:
    """下载并安装运行时到 APP_DIR/vendor"""
    with _domain_errors():
        layout = _runtime(app_dir).compile()
    click.echo(f"就绪: {layout.root}")


@click.command()
@click.argument("app_dir", type=_APP_DIR)
@click.option("--init", "init_cmds", multiple=True, help="启动前执行的初始化命令（可多次）")
@click.option("--run", "run_cmd", default="", help="最终运行命令（默认启动运行时）")
def release(app_dir: str, init_cmds: tuple[str, ...], run_cmd: str) -> None:
    """写出 start.sh 并以 YAML 输出运行环境"""
    script = None
    if init_cmds or run_cmd:
        script = StartScript(init=list(init_cmds), run=run_cmd)
    with _domain_errors():
        descriptor = _runtime(app_dir, start_script=script).release()
    click.echo(dump_yaml(descriptor.to_dict()), nl=False)
