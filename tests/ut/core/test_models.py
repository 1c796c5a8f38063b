"""数据模型测试: 启动脚本 / release 环境合并 / 安装目录"""

from __future__ import annotations

from pathlib import Path

from runtimepack.core.models import InstalledLayout, ReleaseDescriptor, StartScript


class TestStartScript:
    def test_render(self) -> None:
        script = StartScript(init=["a", "b"], run="c")
        assert script.render() == "#!/usr/bin/env bash\na\nb\nc\n"

    def test_render_without_init(self) -> None:
        assert StartScript(run="c").render() == "#!/usr/bin/env bash\nc\n"


class TestReleaseDescriptor:
    def test_merged_env_prepends_path_style(self) -> None:
        rd = ReleaseDescriptor(
            env={"PATH": "$HOME/vendor/mono/bin", "MONO_GC_PARAMS": "x"},
            start_script=StartScript(run="c"),
        )
        merged = rd.merged_env({"PATH": "/opt/bin", "MONO_GC_PARAMS": "old", "LANG": "C"})
        assert merged["PATH"] == "$HOME/vendor/mono/bin:/opt/bin"
        assert merged["MONO_GC_PARAMS"] == "x"
        assert merged["LANG"] == "C"

    def test_merged_env_without_prior(self) -> None:
        rd = ReleaseDescriptor(env={"LD_LIBRARY_PATH": "lib"}, start_script=StartScript())
        assert rd.merged_env({}) == {"LD_LIBRARY_PATH": "lib"}

    def test_to_dict(self) -> None:
        rd = ReleaseDescriptor(
            env={"A": "1"}, start_script=StartScript(init=["i"], run="r"),
            runtime_command="r",
        )
        assert rd.to_dict() == {
            "runtime_command": "r",
            "config_vars": {"A": "1"},
            "start_script": {"init": ["i"], "run": "r"},
        }


class TestInstalledLayout:
    def test_paths(self, tmp_path: Path) -> None:
        layout = InstalledLayout("mono", tmp_path / "vendor" / "mono")
        assert layout.executable == tmp_path / "vendor" / "mono" / "bin" / "mono"
        assert layout.relative_root(tmp_path) == "vendor/mono"

    def test_is_valid_requires_executable(self, tmp_path: Path) -> None:
        layout = InstalledLayout("mono", tmp_path)
        assert not layout.is_valid()
        layout.bin_dir.mkdir()
        layout.executable.write_text("#!/bin/sh\n")
        layout.executable.chmod(0o644)
        assert not layout.is_valid()
        layout.executable.chmod(0o755)
        assert layout.is_valid()
