"""运行时版本号与版本约束

版本号格式: major[.minor[.micro]][_qualifier]，qualifier 前也可用 "-"。
数字分量按数值比较；无 qualifier 的版本排在同号带 qualifier 的版本之前
（3.2.0 < 3.2.0_1），qualifier 之间按字符串比较。

版本约束:
  - 精确:   3.2.0
  - 通配:   3.2.+  （前缀匹配，"+" 只能是最后一个分量）
  - 悲观:   ~>3.2.0 （>= 3.2.0 且 < 3.3），~>3.2 （>= 3.2 且 < 4）
  - 任意:   空串 / "+"
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from runtimepack.core.exceptions import VersionFormatError, VersionResolutionError

_VERSION_RE = re.compile(
    r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:[_-]([0-9A-Za-z][0-9A-Za-z.\-]*))?$"
)
_WILDCARD_RE = re.compile(r"^(\d+(?:\.\d+){0,2})\.\+$")


@dataclass(frozen=True, order=True)
class RuntimeVersion:
    """可比较、不可变的版本号"""

    major: int
    minor: int = 0
    micro: int = 0
    qualifier: str = ""
    text: str = field(default="", compare=False)
    precision: int = field(default=3, compare=False)  # 显式给出的数字分量个数

    @classmethod
    def parse(cls, text: str) -> RuntimeVersion:
        raw = str(text).strip()
        m = _VERSION_RE.match(raw)
        if m is None:
            raise VersionFormatError(f"无效的版本号: '{text}'")
        numbers = [g for g in m.groups()[:3] if g is not None]
        padded = [int(n) for n in numbers] + [0] * (3 - len(numbers))
        return cls(
            major=padded[0], minor=padded[1], micro=padded[2],
            qualifier=m.group(4) or "",
            text=raw, precision=len(numbers),
        )

    @property
    def components(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.micro)

    def __str__(self) -> str:
        if self.text:
            return self.text
        base = f"{self.major}.{self.minor}.{self.micro}"
        return f"{base}_{self.qualifier}" if self.qualifier else base


@dataclass(frozen=True)
class VersionConstraint:
    """版本约束（精确 / 通配 / 悲观 / 任意）"""

    kind: str  # "any", "exact", "wildcard", "pessimistic"
    text: str = ""
    version: RuntimeVersion | None = None
    prefix: tuple[int, ...] = ()

    @classmethod
    def parse(cls, text: str | None) -> VersionConstraint:
        raw = (text or "").strip()
        if raw in ("", "+"):
            return cls(kind="any", text=raw)

        if raw.startswith("~>"):
            base = RuntimeVersion.parse(raw[2:].strip())
            given = base.components[:base.precision]
            prefix = given if base.precision == 1 else given[:-1]
            return cls(kind="pessimistic", text=raw, version=base, prefix=prefix)

        m = _WILDCARD_RE.match(raw)
        if m is not None:
            prefix = tuple(int(p) for p in m.group(1).split("."))
            return cls(kind="wildcard", text=raw, prefix=prefix)

        if "+" in raw:
            raise VersionFormatError(f"通配符 '+' 只能作为最后一个分量: '{raw}'")
        return cls(kind="exact", text=raw, version=RuntimeVersion.parse(raw))

    def matches(self, candidate: RuntimeVersion) -> bool:
        if self.kind == "any":
            return True
        if self.kind == "exact":
            return candidate == self.version
        head = candidate.components[:len(self.prefix)]
        if self.kind == "wildcard":
            return head == self.prefix
        if self.kind == "pessimistic" and self.version is not None:
            return candidate >= self.version and head == self.prefix
        raise VersionFormatError(f"未知的约束类型: {self.kind}")

    def __str__(self) -> str:
        return self.text or "+"


def resolve_version(
    candidates: Iterable[RuntimeVersion],
    constraint: VersionConstraint | str | None,
) -> RuntimeVersion:
    """从候选版本中选出满足约束的最高版本，没有则抛 VersionResolutionError"""
    if not isinstance(constraint, VersionConstraint):
        constraint = VersionConstraint.parse(constraint)
    pool = sorted(candidates)
    matching = [v for v in pool if constraint.matches(v)]
    if not matching:
        available = ", ".join(str(v) for v in pool) or "无"
        raise VersionResolutionError(
            f"没有满足约束 '{constraint}' 的版本，可用版本: {available}"
        )
    return matching[-1]
