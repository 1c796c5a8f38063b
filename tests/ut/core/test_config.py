"""配置加载测试"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from runtimepack.core import config as config_mod
from runtimepack.core.config import DEFAULT_TRUST_STORE_URL, Config, init_config
from runtimepack.core.exceptions import ConfigError


def _write(tmp_path: Path, data: dict) -> str:
    path = tmp_path / "default.yml"
    path.write_text(yaml.dump(data, allow_unicode=True))
    return str(path)


class TestConfig:
    def test_missing_file_returns_defaults(self, tmp_path: Path) -> None:
        cfg = Config.from_file(str(tmp_path / "nonexist.yml"))
        assert cfg.cache_dir == "deps/cache"
        assert cfg.runtimes == {}

    def test_load_runtime_section(self, tmp_path: Path) -> None:
        path = _write(tmp_path, {
            "cache_dir": "/tmp/cache",
            "runtimes": {"mono": {"version": 3.2, "repository_root": "https://repo/mono"}},
            "custom_key": 1,
        })
        cfg = Config.from_file(path)
        rc = cfg.runtime("mono")
        assert cfg.cache_dir == "/tmp/cache"
        assert rc.version == "3.2"
        assert rc.repository_root == "https://repo/mono"
        assert rc.link_root == "/app"
        assert rc.trust_store_url == DEFAULT_TRUST_STORE_URL
        assert cfg.extra == {"custom_key": 1}

    def test_unconfigured_runtime_gets_defaults(self) -> None:
        rc = Config().runtime("mono")
        assert rc.name == "mono"
        assert rc.version == "+"
        assert rc.versions == {}

    def test_unknown_runtime_key_rejected(self) -> None:
        cfg = Config(runtimes={"mono": {"verison": "3.2.0"}})
        with pytest.raises(ConfigError, match="verison"):
            cfg.runtime("mono")

    def test_runtimes_must_be_mapping(self, tmp_path: Path) -> None:
        path = _write(tmp_path, {"runtimes": ["mono"]})
        with pytest.raises(ConfigError, match="runtimes"):
            Config.from_file(path)

    def test_init_config_sets_global(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config_mod, "_current", None)
        path = _write(tmp_path, {"cache_dir": "x"})
        init_config(path)
        assert config_mod.get_config().cache_dir == "x"

    def test_shipped_default_config_loads(self) -> None:
        path = Path(__file__).resolve().parents[3] / "configs" / "default.yml"
        rc = Config.from_file(str(path)).runtime("mono")
        assert rc.version == "3.2.+"
