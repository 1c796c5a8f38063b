"""CLI 端到端测试: 离线仓库 (file://) + 真实下载缓存与命令执行"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from runtimepack.cli import main
from runtimepack.services.platform import PLATFORM_ENV


@pytest.fixture
def workspace(tmp_path: Path, stub_mono_tarball: bytes, monkeypatch: pytest.MonkeyPatch) -> dict:
    monkeypatch.setenv(PLATFORM_ENV, "posix_like")
    # 日志走 stderr，CliRunner 会把它混进输出
    monkeypatch.setenv("RUNTIMEPACK_LOG_LEVEL", "ERROR")
    repo = tmp_path / "repo"
    repo.mkdir()
    artifact = repo / "mono-3.2.0.tar.gz"
    artifact.write_bytes(stub_mono_tarball)
    (repo / "index.yml").write_text(yaml.dump({
        "3.0.12": (repo / "missing.tar.gz").as_uri(),
        "3.2.0": artifact.as_uri(),
    }))

    config = tmp_path / "runtimepack.yml"
    config.write_text(yaml.dump({
        "cache_dir": str(tmp_path / "cache"),
        "runtimes": {"mono": {
            "version": "3.2.+",
            "repository_root": repo.as_uri(),
            "link_root": "",
        }},
    }))
    app = tmp_path / "app"
    app.mkdir()
    return {"config": str(config), "app": app}


def _invoke(workspace: dict, *args: str):
    return CliRunner().invoke(main, ["--config", workspace["config"], *args])


class TestCli:
    def test_detect(self, workspace: dict) -> None:
        result = _invoke(workspace, "detect", str(workspace["app"]))
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "mono-3.2.0"

    def test_detect_not_applicable(self, workspace: dict, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(PLATFORM_ENV, "windows_like")
        result = _invoke(workspace, "detect", str(workspace["app"]))
        assert result.exit_code == 1
        assert result.output.strip() == "no"

    def test_detect_resolution_error(self, workspace: dict, tmp_path: Path) -> None:
        (tmp_path / "repo" / "index.yml").write_text("- not a mapping\n")
        result = _invoke(workspace, "detect", str(workspace["app"]))
        assert result.exit_code == 1
        assert "Error finding mono version" in result.output

    def test_compile_installs_runtime(self, workspace: dict) -> None:
        app: Path = workspace["app"]
        result = _invoke(workspace, "compile", str(app))
        assert result.exit_code == 0, result.output
        assert (app / "vendor" / "mono" / "bin" / "mono").is_file()

    def test_release_outputs_yaml(self, workspace: dict) -> None:
        app: Path = workspace["app"]
        result = _invoke(
            workspace, "release", str(app), "--init", "a", "--init", "b", "--run", "c",
        )
        assert result.exit_code == 0, result.output
        data = yaml.safe_load(result.output)
        assert data["start_script"] == {"init": ["a", "b"], "run": "c"}
        assert data["config_vars"]["MONO_GC_PARAMS"] == "major=marksweep-par,max-heap-size=464M"
        assert (app / "start.sh").read_text() == "#!/usr/bin/env bash\na\nb\nc\n"

    def test_release_default_run_command(self, workspace: dict) -> None:
        result = _invoke(workspace, "release", str(workspace["app"]))
        data = yaml.safe_load(result.output)
        assert data["start_script"]["run"] == "$HOME/vendor/mono/bin/mono --server"

    def test_missing_app_dir(self, workspace: dict, tmp_path: Path) -> None:
        result = _invoke(workspace, "detect", str(tmp_path / "nope"))
        assert result.exit_code == 2
