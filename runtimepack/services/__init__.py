"""运行时服务模块

拆分说明:
- platform.py: 平台识别
- installer.py: 制品解压安装
- environment.py: release 环境变量与启动脚本组装
- lifecycle.py: detect / compile / release 生命周期控制
"""

from runtimepack.services.environment import EnvironmentComposer
from runtimepack.services.installer import Installer
from runtimepack.services.lifecycle import MonoRuntime
from runtimepack.services.platform import detect_platform

__all__ = [
    "EnvironmentComposer",
    "Installer",
    "MonoRuntime",
    "detect_platform",
]
