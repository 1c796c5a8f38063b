"""按 URI 落盘的下载缓存

职责:
- 以 URI 为键缓存下载内容，命中时不访问网络
- refresh 模式每次重新下载（版本索引），失败时退回缓存副本
- 先下载到临时文件再原子替换，中途失败不会留下半截缓存
- 可选 sha256 校验
- 同一 URI 的并发请求合并为一次下载，不同 URI 互不阻塞

缓存布局:
  <cache_dir>/<sha256(uri)>.cached
"""

from __future__ import annotations

import hashlib
import http.client
import logging
import os
import shutil
import tempfile
import threading
import urllib.error
import urllib.request
import weakref
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO

from runtimepack.utils.net import validate_url_scheme

logger = logging.getLogger(__name__)


class DownloadCache:
    """下载缓存 - 本地优先 + 远程下载"""

    def __init__(self, cache_dir: str | Path, *, timeout: int = 60) -> None:
        self.cache_dir = Path(cache_dir)
        self.timeout = timeout
        # 只要有线程持有某 URI 的锁，条目就不会被回收
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._guard = threading.Lock()

    def cached_path(self, uri: str) -> Path:
        key = hashlib.sha256(uri.encode("utf-8")).hexdigest()
        return self.cache_dir / f"{key}.cached"

    def contains(self, uri: str) -> bool:
        return self.cached_path(uri).is_file()

    def evict(self, uri: str) -> bool:
        """删除缓存条目，返回是否存在过"""
        path = self.cached_path(uri)
        with self._lock_for(uri):
            if not path.exists():
                return False
            path.unlink()
        logger.info("缓存已清除: %s", uri)
        return True

    @contextmanager
    def get(
        self, uri: str, sha256: str = "", *, refresh: bool = False,
    ) -> Iterator[IO[bytes]]:
        """获取 URI 对应内容的只读句柄，退出 with 时自动关闭

        refresh=True 时总是重新下载（用于版本索引这类会变化的内容），
        下载失败且本地已有缓存时退回使用缓存。
        """
        path = self._refresh(uri) if refresh else self._ensure(uri, sha256)
        with open(path, "rb") as stream:
            yield stream

    def _lock_for(self, uri: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(uri)
            if lock is None:
                lock = self._locks[uri] = threading.Lock()
            return lock

    def _refresh(self, uri: str) -> Path:
        dest = self.cached_path(uri)
        with self._lock_for(uri):
            validate_url_scheme(uri, context="index download")
            try:
                self._download(uri, dest)
            except ConnectionError as e:
                if not dest.is_file():
                    raise
                logger.warning("刷新失败，使用缓存副本: %s (%s)", uri, e)
        return dest

    def _ensure(self, uri: str, sha256: str) -> Path:
        dest = self.cached_path(uri)
        with self._lock_for(uri):
            if dest.is_file():
                if not sha256 or _file_sha256(dest) == sha256:
                    logger.info("缓存命中: %s", uri)
                    return dest
                logger.warning("缓存内容校验和不一致，重新下载: %s", uri)
                dest.unlink()

            logger.info("缓存未命中，下载: %s", uri)
            validate_url_scheme(uri, context="artifact download")
            self._download(uri, dest)

            if sha256:
                actual = _file_sha256(dest)
                if actual != sha256:
                    dest.unlink(missing_ok=True)
                    raise ValueError(
                        f"校验和不匹配 {uri}: 期望 {sha256}, 实际 {actual}",
                    )
                logger.info("  校验和通过: %s", uri)
        return dest

    def _download(self, uri: str, dest: Path) -> None:
        dest.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(dest.parent), suffix=".part")
        try:
            with os.fdopen(fd, "wb") as out, urllib.request.urlopen(  # nosec B310
                uri, timeout=self.timeout,
            ) as resp:
                shutil.copyfileobj(resp, out)
            os.replace(tmp, str(dest))
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            raise ConnectionError(f"下载失败: {uri} - {e}") from e
        finally:
            # 成功时临时文件已被 replace 走
            Path(tmp).unlink(missing_ok=True)
        logger.info("  已保存: %s", dest)


def _file_sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            digest.update(chunk)
    return digest.hexdigest()
