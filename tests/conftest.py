"""公共测试夹具: 运行时压缩包 / 假下载缓存 / 假版本索引 / 命令记录器"""

from __future__ import annotations

import io
import tarfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import IO

import pytest

from runtimepack.core.version import RuntimeVersion
from runtimepack.utils.shell import CommandResult

STUB_FILES: dict[str, tuple[bytes, int]] = {
    "bin/mono": (b"#!/bin/sh\necho mono\n", 0o755),
    "bin/mozroots": (b"#!/bin/sh\nexit 0\n", 0o755),
    "lib/libmono-2.0.so": (b"\x7fELF", 0o644),
    "lib/pkgconfig/mono-2.pc": (b"prefix=/app/vendor/mono\n", 0o644),
    "include/mono-2.0/mono/jit/jit.h": (b"/* jit */\n", 0o644),
    "share/aclocal/mono.m4": (b"dnl mono\n", 0o644),
}


def build_tarball(files: dict[str, tuple[bytes, int]], compression: str = "gz") -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode=f"w:{compression}") as tf:
        dirs = sorted({name.rsplit("/", 1)[0] for name in files if "/" in name})
        for d in dirs:
            info = tarfile.TarInfo(d)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tf.addfile(info)
        for name, (data, mode) in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = mode
            tf.addfile(info, io.BytesIO(data))
    return buf.getvalue()


@pytest.fixture
def stub_mono_tarball() -> bytes:
    """最小 mono 发行包 (tar.gz): bin/mono 可执行"""
    return build_tarball(STUB_FILES)


@pytest.fixture
def tarball_factory() -> Callable[..., bytes]:
    return build_tarball


class FakeStore:
    """内存下载缓存: uri -> bytes，记录每次获取并跟踪句柄是否关闭"""

    def __init__(self, contents: dict[str, bytes] | None = None) -> None:
        self.contents = dict(contents or {})
        self.requests: list[str] = []
        self.streams: list[io.BytesIO] = []

    @contextmanager
    def get(self, uri: str, sha256: str = "", *, refresh: bool = False) -> Iterator[IO[bytes]]:
        self.requests.append(uri)
        if uri not in self.contents:
            raise ConnectionError(f"下载失败: {uri} - 404")
        stream = io.BytesIO(self.contents[uri])
        self.streams.append(stream)
        try:
            yield stream
        finally:
            stream.close()


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


class FakeIndex:
    """固定返回 (3.2.0, test-uri) 的版本索引，可设置为抛错"""

    def __init__(self, version: str = "3.2.0", uri: str = "test-uri") -> None:
        self.item = (RuntimeVersion.parse(version), uri)
        self.error: Exception | None = None
        self.calls: list[tuple[str, str | None]] = []

    def find_item(self, runtime_id: str, constraint: str | None) -> tuple[RuntimeVersion, str]:
        self.calls.append((runtime_id, constraint))
        if self.error is not None:
            raise self.error
        return self.item


@pytest.fixture
def fake_index() -> FakeIndex:
    return FakeIndex()


class RecordingExecutor:
    """记录执行的命令与环境变量；returncodes 按命令子串指定退出码"""

    def __init__(self, returncodes: dict[str, int] | None = None) -> None:
        self.returncodes = returncodes or {}
        self.calls: list[tuple[str, dict[str, str] | None]] = []

    def execute(
        self,
        cmd: str,
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        self.calls.append((cmd, env))
        for pattern, rc in self.returncodes.items():
            if pattern in cmd:
                return CommandResult(returncode=rc, stderr=f"{pattern} failed")
        return CommandResult(returncode=0)

    def find(self, pattern: str) -> tuple[str, dict[str, str] | None]:
        for call in self.calls:
            if pattern in call[0]:
                return call
        raise AssertionError(f"未执行包含 {pattern!r} 的命令: {self.calls}")


@pytest.fixture
def recording_executor() -> RecordingExecutor:
    return RecordingExecutor()
