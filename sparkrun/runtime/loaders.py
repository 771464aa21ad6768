"""
Run Configuration Loaders.

Implementations of the RunConfigurationLoader protocol for different
storage backends.

Design Principle:
    Start simple, scale as needed.
    - Development: FileRunConfigurationLoader (YAML/JSON files)
    - Testing: MemoryRunConfigurationLoader (in-memory)
    - Production: the host platform's own metastore (implement in your project)

Usage:
    # File-based
    loader = FileRunConfigurationLoader("run-configurations/")
    run_config = loader.get_run_configuration("spark-cluster")

    # Memory (testing)
    loader = MemoryRunConfigurationLoader()
    loader.add(RunConfiguration(name="local", schema="http://", url="localhost:53000"))
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from sparkrun.config.schemas import RunConfiguration

logger = logging.getLogger(__name__)

_SUFFIXES = (".json", ".yaml", ".yml")


class FileRunConfigurationLoader:
    """
    Loads run configurations from JSON/YAML files.

    One file per run configuration; the file stem is the name unless
    the document sets one:

    run-configurations/
    ├── spark-cluster.json
    └── local-daemon.yaml

    File Format (spark-cluster.json):
        {
            "description": "Production Spark cluster",
            "schema": "http://",
            "url": "spark-daemon.internal:53000"
        }
    """

    def __init__(self, base_dir: str | Path):
        """
        Initialize loader.

        Args:
            base_dir: Directory holding run configuration files
        """
        self._base_dir = Path(base_dir)

    def get_run_configuration(self, name: str) -> RunConfiguration | None:
        """
        Get a run configuration by name.

        Tries <name>.json, <name>.yaml and <name>.yml in that order.

        Returns:
            RunConfiguration or None if not found or invalid
        """
        for suffix in _SUFFIXES:
            path = self._base_dir / f"{name}{suffix}"
            if path.exists():
                return self._load_run_configuration(path)

        logger.debug(f"[file_loader] Run configuration not found: {name}")
        return None

    def list_run_configurations(self) -> list[RunConfiguration]:
        """
        Load every valid run configuration in the directory.

        Invalid files are logged and skipped.
        """
        if not self._base_dir.exists():
            logger.warning(f"[file_loader] Directory not found: {self._base_dir}")
            return []

        configs: dict[str, RunConfiguration] = {}
        for path in sorted(self._base_dir.iterdir()):
            if path.suffix not in _SUFFIXES:
                continue
            config = self._load_run_configuration(path)
            if config is not None and config.name not in configs:
                configs[config.name] = config

        logger.info(f"[file_loader] Loaded {len(configs)} run configurations")
        return [configs[name] for name in sorted(configs)]

    def _load_run_configuration(self, path: Path) -> RunConfiguration | None:
        data = self._load_document(path)
        if not isinstance(data, dict):
            if data is not None:
                logger.error(f"[file_loader] Expected a mapping in {path}")
            return None

        data.setdefault("name", path.stem)
        try:
            return RunConfiguration.model_validate(data)
        except ValidationError as e:
            logger.error(f"[file_loader] Invalid run configuration {path}: {e}")
            return None

    def _load_document(self, path: Path) -> Any:
        """Load a JSON or YAML file."""
        try:
            with path.open(encoding="utf-8") as f:
                if path.suffix == ".json":
                    return json.load(f)
                return yaml.safe_load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            logger.error(f"[file_loader] Failed to load {path}: {e}")
            return None


class MemoryRunConfigurationLoader:
    """
    In-memory run configuration loader for testing.

    Usage:
        loader = MemoryRunConfigurationLoader()
        loader.add(RunConfiguration(name="local", url="localhost:53000"))
        loader.get_run_configuration("local")
    """

    def __init__(self, configs: list[RunConfiguration] | None = None):
        self._configs: dict[str, RunConfiguration] = {}
        for config in configs or []:
            self.add(config)

    def add(self, config: RunConfiguration) -> None:
        """Add (or replace) a run configuration."""
        self._configs[config.name] = config

    def get_run_configuration(self, name: str) -> RunConfiguration | None:
        return self._configs.get(name)

    def list_run_configurations(self) -> list[RunConfiguration]:
        return [self._configs[name] for name in sorted(self._configs)]

    def clear(self) -> None:
        """Clear all run configurations."""
        self._configs.clear()
