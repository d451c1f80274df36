# siqpack/tests/test_cli.py
"""
Tests for CLI interface
"""
import json

import pytest
from click.testing import CliRunner

from conftest import single_question
from siqpack.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for name in ("SIQPACK_WORKERS", "SIQPACK_JPEG_QUALITY", "SIQPACK_LEGACY_ENCODING"):
        monkeypatch.delenv(name, raising=False)


class TestCLI:
    """Tests for CLI commands"""

    def test_cli_help(self, runner):
        """Should show help message"""
        result = runner.invoke(cli, ['--help'])
        assert result.exit_code == 0
        assert "siqpack" in result.output
        assert "optimize" in result.output

    def test_version_command(self, runner):
        """Should show version"""
        result = runner.invoke(cli, ['version'])
        assert result.exit_code == 0
        assert "siqpack v1.0.0" in result.output


class TestOptimizeCommand:

    def test_success(self, runner, sample_siq, monkeypatch):
        """Should write the optimized package next to the input"""
        monkeypatch.chdir(sample_siq.parent)
        result = runner.invoke(cli, ['optimize', 'quiz', '--workers', '2'])
        assert result.exit_code == 0, result.output
        assert "Done!" in result.output
        assert "Size reduced by" in result.output
        assert (sample_siq.parent / "quiz-optimized.siq").exists()

    def test_missing_package_exits_1(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(cli, ['optimize', 'nothing'])
        assert result.exit_code == 1
        assert "Unable to locate file" in result.output

    def test_wrong_extension_exits_1(self, runner, tmp_path, monkeypatch):
        (tmp_path / "quiz.zip").write_bytes(b"")
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(cli, ['optimize', 'quiz.zip'])
        assert result.exit_code == 1
        assert "Unsupported file extension" in result.output

    def test_rejects_zero_workers(self, runner, sample_siq, monkeypatch):
        monkeypatch.chdir(sample_siq.parent)
        result = runner.invoke(cli, ['optimize', 'quiz', '--workers', '0'])
        assert result.exit_code == 2

    def test_broken_config_exits_1(self, runner, sample_siq, monkeypatch):
        (sample_siq.parent / "siqpack.yaml").write_text("workers: [\n")
        monkeypatch.chdir(sample_siq.parent)
        result = runner.invoke(cli, ['optimize', 'quiz'])
        assert result.exit_code == 1
        assert "ConfigurationError" in result.output


class TestNormalizeCommand:

    def test_prints_json(self, runner, tmp_path, sample_descriptor, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "content.xml").write_text(sample_descriptor, encoding="utf-8")
        result = runner.invoke(cli, ['normalize', 'content.xml'])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["id"] == "pkg-1"
        assert data["name"] == "Test Pack"

    def test_writes_file(self, runner, tmp_path, sample_descriptor, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "content.xml").write_text(sample_descriptor, encoding="utf-8")
        result = runner.invoke(cli, ['normalize', 'content.xml', '-o', 'out.json'])
        assert result.exit_code == 0
        assert json.loads((tmp_path / "out.json").read_text(encoding="utf-8"))["id"] == "pkg-1"

    def test_warnings_reported(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        descriptor = single_question(
            '<question price="1"><scenario><atom type="video">@v.mp4</atom></scenario>'
            "<right><answer>a</answer></right></question>"
        )
        (tmp_path / "content.xml").write_text(descriptor, encoding="utf-8")
        result = runner.invoke(cli, ['normalize', 'content.xml'])
        assert result.exit_code == 0
        assert "[normalize:warn]" in result.output
        assert "video" in result.output

    def test_malformed_exits_1(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        descriptor = single_question('<question price="1"><right><answer>a</answer></right></question>')
        (tmp_path / "content.xml").write_text(descriptor, encoding="utf-8")
        result = runner.invoke(cli, ['normalize', 'content.xml'])
        assert result.exit_code == 1
        assert "MalformedDescriptorError" in result.output


class TestConfigCommand:

    def test_shows_sources(self, runner, tmp_path, monkeypatch):
        (tmp_path / "siqpack.yaml").write_text("workers: 2\nfavorite: tea\n")
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(cli, ['config'])
        assert result.exit_code == 0
        assert "workers" in result.output
        assert "(siqpack.yaml)" in result.output
        assert "favorite: tea" in result.output

    def test_template(self, runner):
        result = runner.invoke(cli, ['config', '--template'])
        assert result.exit_code == 0
        assert "jpeg_quality: 85" in result.output
