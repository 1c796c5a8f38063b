"""runtimepack - 应用运行时供给模块 (detect / compile / release)"""

__version__ = "0.1.0"
