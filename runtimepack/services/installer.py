"""制品解压安装

将下载缓存给出的字节流按 tar 包解压到 <app_dir>/vendor/<runtime>/，
自动识别 gzip / bz2 / xz 压缩，保留目录结构与可执行权限位。

- 目标目录不存在时自动创建
- 重复解压覆盖已有文件（支持重新 compile）
- 越出目标目录的条目（绝对路径、..、指向外部的链接）一律拒绝
- 压缩包截断/损坏时抛 ExtractionError，已解压的部分保留
"""

from __future__ import annotations

import logging
import tarfile
import zlib
from pathlib import Path
from typing import IO

from runtimepack.core.exceptions import ExtractionError
from runtimepack.core.models import InstalledLayout

logger = logging.getLogger(__name__)


class Installer:
    """运行时安装器 - 不访问网络"""

    def __init__(self, runtime_name: str) -> None:
        self.runtime_name = runtime_name

    def extract(self, stream: IO[bytes], target_dir: str | Path) -> InstalledLayout:
        target = Path(target_dir)
        try:
            target.mkdir(parents=True, exist_ok=True)
            # 流式模式: 不要求 stream 可 seek
            with tarfile.open(fileobj=stream, mode="r|*") as tf:
                tf.extractall(path=str(target), filter="data")  # noqa: S202
        except (tarfile.TarError, EOFError, zlib.error, OSError) as e:
            logger.error("解压失败 %s: %s", target, e)
            raise ExtractionError(f"解压 {self.runtime_name} 到 {target} 失败: {e}") from e

        layout = InstalledLayout(runtime_name=self.runtime_name, root=target)
        if not layout.is_valid():
            raise ExtractionError(
                f"解压后缺少可执行入口: {layout.executable}"
            )
        logger.info("解压完成: %s -> %s", self.runtime_name, target)
        return layout
