"""平台识别

默认根据当前解释器所在系统判断；构建机与目标平台不一致时，
可通过环境变量 RUNTIMEPACK_PLATFORM (posix_like / windows_like) 覆盖。
"""

from __future__ import annotations

import logging
import os
import sys

from runtimepack.core.exceptions import ConfigError
from runtimepack.core.models import Platform

logger = logging.getLogger(__name__)

PLATFORM_ENV = "RUNTIMEPACK_PLATFORM"


def detect_platform() -> Platform:
    """返回当前构建的目标平台"""
    override = os.environ.get(PLATFORM_ENV, "").strip()
    if override:
        try:
            return Platform(override.lower())
        except ValueError:
            allowed = [p.value for p in Platform]
            raise ConfigError(
                f"{PLATFORM_ENV}={override} 无效，可选: {allowed}"
            ) from None
    if os.name == "nt" or sys.platform.startswith(("win", "cygwin")):
        return Platform.WINDOWS_LIKE
    return Platform.POSIX_LIKE
