"""Unit tests for layered settings loading."""

import pytest

from cvrender.utils.config import Settings, load_settings


@pytest.mark.unit
def test_defaults_without_file_or_environment():
    """Test settings defaults."""
    settings = load_settings(environ={})

    assert isinstance(settings, Settings)
    assert settings.template.source.types == ["BUNDLED"]
    assert settings.template.source.tier_types == {}
    assert settings.compiler.command == "pdflatex"
    assert settings.compiler.timeout_s == 30.0
    assert settings.compiler.keep_artifacts is False
    assert settings.logging.render_events_file is None


@pytest.mark.unit
def test_yaml_file_overrides_defaults(tmp_path):
    """Test merging a YAML settings file."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "template:\n"
        "  source:\n"
        "    types: [FILESYSTEM, BUNDLED]\n"
        "    path: /srv/templates\n"
        "    tier_types:\n"
        "      FREE: [BUNDLED]\n"
        "compiler:\n"
        "  timeout_s: 45\n"
    )

    settings = load_settings(config_file, environ={})

    assert settings.template.source.types == ["FILESYSTEM", "BUNDLED"]
    assert settings.template.source.path == "/srv/templates"
    assert settings.template.source.tier_types == {"FREE": ["BUNDLED"]}
    assert settings.compiler.timeout_s == 45.0
    assert settings.compiler.num_passes == 1


@pytest.mark.unit
def test_environment_overrides_file(tmp_path):
    """Test that environment variables override the YAML file."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("compiler:\n  timeout_s: 45\n")
    environ = {
        "TEMPLATE_SOURCE_TYPES": "filesystem, bundled,",
        "COMPILE_TIMEOUT_S": "5",
        "LATEX_NUM_PASSES": "2",
        "KEEP_LATEX_ARTIFACTS": "True",
        "RENDER_EVENTS_FILE": "",
    }

    settings = load_settings(config_file, environ=environ)

    assert settings.template.source.types == ["filesystem", "bundled"]
    assert settings.compiler.timeout_s == 5.0
    assert settings.compiler.num_passes == 2
    assert settings.compiler.keep_artifacts is True
    assert settings.logging.render_events_file is None


@pytest.mark.unit
def test_config_path_from_environment(tmp_path):
    """Test locating the settings file through CVRENDER_CONFIG_PATH."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("compiler:\n  command: lualatex\n")

    settings = load_settings(environ={"CVRENDER_CONFIG_PATH": str(config_file)})

    assert settings.compiler.command == "lualatex"


@pytest.mark.unit
def test_missing_config_file_raises(tmp_path):
    """Test error handling for a missing settings file."""
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        load_settings(tmp_path / "absent.yaml", environ={})
