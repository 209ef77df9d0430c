"""
Runtime settings.

Settings are layered, later layers overriding earlier ones:
1. Dataclass defaults below
2. Optional YAML file (argument, or CVRENDER_CONFIG_PATH)
3. Environment variables (a .env file is loaded first)

Example config.yaml:

    template:
      source:
        types: [FILESYSTEM, BUNDLED]
        path: /opt/cvrender/templates
        tier_types:
          FREE: [BUNDLED]
    compiler:
      timeout_s: 45
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf


@dataclass
class TemplateSourceSettings:
    # Ordered by priority: first entry wins on template id conflicts
    types: List[str] = field(default_factory=lambda: ["BUNDLED"])
    path: str = "templates/resume"
    # Optional per-tier override of `types`, keyed by tier name
    tier_types: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class TemplateSettings:
    source: TemplateSourceSettings = field(default_factory=TemplateSourceSettings)


@dataclass
class CompilerSettings:
    command: str = "pdflatex"
    num_passes: int = 1
    timeout_s: float = 30.0
    max_concurrent: int = 4
    keep_artifacts: bool = False
    # When set, the compiler runs inside this image with no network access
    docker_image: Optional[str] = None
    docker_memory_mb: int = 512
    docker_cpus: float = 1.0


@dataclass
class LoggingSettings:
    logs_path: Optional[str] = None
    render_events_file: Optional[str] = None


@dataclass
class Settings:
    template: TemplateSettings = field(default_factory=TemplateSettings)
    compiler: CompilerSettings = field(default_factory=CompilerSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


# Environment variable -> dotted settings key
ENV_OVERRIDES = {
    "TEMPLATE_SOURCE_TYPES": "template.source.types",
    "TEMPLATE_SOURCE_PATH": "template.source.path",
    "LATEX_COMPILER": "compiler.command",
    "LATEX_NUM_PASSES": "compiler.num_passes",
    "COMPILE_TIMEOUT_S": "compiler.timeout_s",
    "MAX_CONCURRENT_COMPILATIONS": "compiler.max_concurrent",
    "KEEP_LATEX_ARTIFACTS": "compiler.keep_artifacts",
    "LATEX_DOCKER_IMAGE": "compiler.docker_image",
    "LOGS_PATH": "logging.logs_path",
    "RENDER_EVENTS_FILE": "logging.render_events_file",
}


def _env_value(env_name: str, raw: str):
    if env_name == "TEMPLATE_SOURCE_TYPES":
        return [part.strip() for part in raw.split(",") if part.strip()]
    if env_name == "KEEP_LATEX_ARTIFACTS":
        return raw.strip().lower() == "true"
    return raw


def load_settings(config_path: Path = None, environ: Optional[Dict[str, str]] = None) -> Settings:
    """
    Build Settings from defaults, an optional YAML file and the environment.

    Args:
        config_path: YAML file to merge (defaults to CVRENDER_CONFIG_PATH if set)
        environ: Environment mapping (defaults to os.environ after load_dotenv())

    Returns:
        Typed Settings instance

    Raises:
        omegaconf.errors.ValidationError: If a value has the wrong type
        FileNotFoundError: If an explicit config_path does not exist
    """
    if environ is None:
        load_dotenv()
        environ = dict(os.environ)

    config = OmegaConf.structured(Settings)

    if config_path is None and environ.get("CVRENDER_CONFIG_PATH"):
        config_path = Path(environ["CVRENDER_CONFIG_PATH"])

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        config = OmegaConf.merge(config, OmegaConf.load(config_path))

    for env_name, key in ENV_OVERRIDES.items():
        raw = environ.get(env_name)
        if raw is None or raw == "":
            continue
        OmegaConf.update(config, key, _env_value(env_name, raw), merge=False)

    return OmegaConf.to_object(config)
