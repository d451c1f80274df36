# config_utils.py - YAML Configuration System for siqpack
"""
siqpack configuration utilities with YAML file support.

Configuration Resolution Order (highest to lowest priority):
1. Environment variables (SIQPACK_WORKERS, SIQPACK_JPEG_QUALITY, ...)
2. siqpack.yaml in the current directory
3. ~/.siqpack/config.yaml (global defaults)
4. Built-in defaults

Usage:
    from siqpack.config_utils import get_config, make_run_config

    config = get_config()
    run = make_run_config("quiz.siq", config)
    print(run.work_dir, run.output_path)
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

import yaml

from siqpack.errors import ConfigurationError
from siqpack.path_utils import derive_output_path, derive_work_dir, resolve_package_path


@dataclass
class SiqpackConfig:
    """Complete siqpack configuration"""
    # Package layout
    extension: str = ".siq"
    descriptor_name: str = "content.xml"
    manifest_name: str = "[Content_Types].xml"
    normalized_name: str = "content.json"
    images_dir: str = "Images"
    audio_dir: str = "Audio"
    texts_dir: str = "Texts"
    media_marker: str = "@"

    # Derived sibling paths
    workdir_suffix: str = "-temp"
    output_suffix: str = "-optimized"

    # Archive entries without the UTF-8 flag are decoded with this codepage
    legacy_encoding: str = "cp866"

    # Optimization / archiving
    workers: int = 4
    jpeg_quality: int = 85
    compress_level: int = 9

    # Extra settings from config file
    extra: Dict[str, Any] = field(default_factory=dict)

    # Track where values came from (for debugging)
    _sources: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RunConfig:
    """Paths for one pipeline run, derived once from the input package"""
    package_path: Path
    work_dir: Path
    output_path: Path
    descriptor_path: Path
    normalized_path: Path
    images_dir: Path
    manifest_path: Path
    texts_dir: Path


STRING_KEYS = {
    "extension", "descriptor_name", "manifest_name", "normalized_name",
    "images_dir", "audio_dir", "texts_dir", "media_marker",
    "workdir_suffix", "output_suffix", "legacy_encoding",
}
INT_KEYS = {"workers", "jpeg_quality", "compress_level"}

ENV_VARS = {
    "SIQPACK_WORKERS": "workers",
    "SIQPACK_JPEG_QUALITY": "jpeg_quality",
    "SIQPACK_LEGACY_ENCODING": "legacy_encoding",
}


class ConfigLoader:
    """Load configuration from multiple sources"""

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir) if base_dir else Path.cwd()
        self.config = SiqpackConfig()

    def load(self) -> SiqpackConfig:
        """Load configuration from all sources in priority order"""
        # Load in reverse priority (lowest first, higher overwrites)
        self._load_global_config()
        self._load_yaml_config()
        self._load_env_vars()
        self._validate()
        return self.config

    def _load_global_config(self):
        """Load ~/.siqpack/config.yaml if it exists"""
        global_config = Path.home() / ".siqpack" / "config.yaml"
        if global_config.exists():
            self._load_yaml_file(global_config, "global")

    def _load_yaml_config(self):
        """Load siqpack.yaml from the working folder"""
        yaml_path = self.base_dir / "siqpack.yaml"
        if yaml_path.exists():
            self._load_yaml_file(yaml_path, "siqpack.yaml")

    def _load_yaml_file(self, path: Path, source_name: str):
        """Load settings from a YAML file"""
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                message=f"Failed to parse {path}",
                suggestion="Fix the YAML syntax or remove the file",
                context={"file": str(path)},
                cause=e,
            )

        if not isinstance(data, dict):
            raise ConfigurationError(
                message=f"{path.name} must contain a mapping of settings",
                context={"file": str(path), "found": type(data).__name__},
            )

        for key, value in data.items():
            if key in STRING_KEYS or key in INT_KEYS:
                self._set(key, value, source_name)
            else:
                self.config.extra[key] = value

    def _load_env_vars(self):
        """Load from environment variables (highest priority)"""
        for env_name, attr in ENV_VARS.items():
            value = os.environ.get(env_name)
            if value:
                self._set(attr, value, f"env:{env_name}")

    def _set(self, attr: str, value: Any, source_name: str):
        if attr in INT_KEYS:
            try:
                value = int(value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(
                    message=f"Setting '{attr}' must be a whole number",
                    context={"value": value, "source": source_name},
                    cause=e,
                )
        else:
            value = str(value)
        setattr(self.config, attr, value)
        self.config._sources[attr] = source_name

    def _validate(self):
        if self.config.workers < 1:
            raise ConfigurationError(
                message="Setting 'workers' must be at least 1",
                context={"workers": self.config.workers,
                         "source": self.config._sources.get("workers", "default")},
            )
        if not 1 <= self.config.jpeg_quality <= 95:
            raise ConfigurationError(
                message="Setting 'jpeg_quality' must be between 1 and 95",
                context={"jpeg_quality": self.config.jpeg_quality},
            )
        if not 0 <= self.config.compress_level <= 9:
            raise ConfigurationError(
                message="Setting 'compress_level' must be between 0 and 9",
                context={"compress_level": self.config.compress_level},
            )
        if not self.config.extension.startswith("."):
            self.config.extension = "." + self.config.extension


# ============================================================================
# Public API
# ============================================================================

def get_config(base_dir: Optional[Path] = None) -> SiqpackConfig:
    """
    Get complete siqpack configuration.

    Args:
        base_dir: Folder holding siqpack.yaml (defaults to cwd)

    Returns:
        SiqpackConfig with all settings resolved
    """
    loader = ConfigLoader(base_dir)
    return loader.load()


def make_run_config(
    raw_path: str,
    config: Optional[SiqpackConfig] = None,
    cwd: Optional[Path] = None
) -> RunConfig:
    """
    Resolve the input package and derive every path the pipeline touches.

    Raises:
        InputValidationError: Wrong extension or missing package
    """
    if config is None:
        config = get_config(cwd)

    package_path = resolve_package_path(raw_path, config.extension, cwd)
    work_dir = derive_work_dir(package_path, config.workdir_suffix)

    return RunConfig(
        package_path=package_path,
        work_dir=work_dir,
        output_path=derive_output_path(package_path, config.output_suffix),
        descriptor_path=work_dir / config.descriptor_name,
        normalized_path=work_dir / config.normalized_name,
        images_dir=work_dir / config.images_dir,
        manifest_path=work_dir / config.manifest_name,
        texts_dir=work_dir / config.texts_dir,
    )


def describe_config(config: SiqpackConfig) -> Dict[str, Any]:
    """Settings with their source, for display."""
    rows = {}
    for key in sorted(STRING_KEYS | INT_KEYS):
        rows[key] = {
            "value": getattr(config, key),
            "source": config._sources.get(key, "default"),
        }
    return rows


def create_config_template() -> str:
    """Generate a siqpack.yaml template."""
    return '''# siqpack configuration file
# Every key is optional; these are the defaults.

workers: 4             # Threads for extraction and image optimization
jpeg_quality: 85       # Re-encode quality for JPEG images (1-95)
compress_level: 9      # Deflate level for the output archive
legacy_encoding: cp866 # Codepage for archive names without the UTF-8 flag
output_suffix: -optimized
'''
