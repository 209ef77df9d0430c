"""Integration tests for the cvrender command line."""

import json
import shlex

import pytest
from omegaconf import OmegaConf

from cvrender.cli import app


@pytest.fixture
def config_file(tmp_path, fake_engine):
    path = tmp_path / "config.yaml"
    settings = {
        "template": {"source": {"types": ["BUNDLED"]}},
        "compiler": {"command": shlex.join(fake_engine), "timeout_s": 20},
    }
    OmegaConf.save(OmegaConf.create(settings), path)
    return path


@pytest.fixture
def resume_file(tmp_path, sample_resume):
    path = tmp_path / "resume.json"
    path.write_text(json.dumps(sample_resume))
    return path


@pytest.mark.integration
def test_templates_json(cli_runner, config_file):
    """Test JSON listing of templates for a tier."""
    result = cli_runner.invoke(
        app, ["templates", "--tier", "professional", "--json", "-c", str(config_file)]
    )

    assert result.exit_code == 0, result.output
    assert [t["id"] for t in json.loads(result.stdout)] == ["engineering", "executive"]


@pytest.mark.integration
def test_templates_table(cli_runner, config_file):
    """Test the human-readable template listing."""
    result = cli_runner.invoke(app, ["templates", "-c", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "engineering" in result.stdout
    assert "executive" not in result.stdout


@pytest.mark.integration
def test_unknown_tier_is_rejected(cli_runner, config_file):
    """Test that an unknown tier is a usage error."""
    result = cli_runner.invoke(app, ["templates", "--tier", "GOLD", "-c", str(config_file)])
    assert result.exit_code == 2


@pytest.mark.integration
def test_render_tex(cli_runner, config_file, resume_file, tmp_path):
    """Test writing the LaTeX markup instead of a PDF."""
    output = tmp_path / "out.tex"
    result = cli_runner.invoke(
        app, ["render", str(resume_file), "--tex", "-o", str(output), "-c", str(config_file)]
    )

    assert result.exit_code == 0, result.output
    markup = output.read_text(encoding="utf-8")
    assert "Ada Lovelace" in markup
    assert "R\\&D Engineer" in markup


@pytest.mark.integration
def test_render_pdf(cli_runner, config_file, resume_file, tmp_path):
    """Test rendering a resume file to PDF."""
    output = tmp_path / "out.pdf"
    result = cli_runner.invoke(
        app, ["render", str(resume_file), "-o", str(output), "-c", str(config_file)]
    )

    assert result.exit_code == 0, result.output
    assert output.read_bytes().startswith(b"%PDF")


@pytest.mark.integration
def test_render_access_denied(cli_runner, config_file, resume_file, tmp_path):
    """Test that a template above the caller's tier fails with the upgrade message."""
    result = cli_runner.invoke(
        app,
        ["render", str(resume_file), "-t", "executive", "-o", str(tmp_path / "x.pdf"),
         "-c", str(config_file)],
    )

    assert result.exit_code == 1
    assert "Professional plan" in result.output
    assert not (tmp_path / "x.pdf").exists()


@pytest.mark.integration
def test_render_invalid_json(cli_runner, config_file, tmp_path):
    """Test error handling for a malformed resume file."""
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")

    result = cli_runner.invoke(app, ["render", str(bad), "-c", str(config_file)])

    assert result.exit_code == 1
    assert "Invalid JSON" in result.output


@pytest.mark.integration
def test_stores(cli_runner, config_file):
    """Test listing the active template stores."""
    result = cli_runner.invoke(app, ["stores", "-c", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "BundledTemplateStore" in result.stdout
