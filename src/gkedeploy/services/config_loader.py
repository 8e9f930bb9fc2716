"""Configuration loader for gkedeploy."""

import json
from pathlib import Path
from typing import Any, Dict

import yaml

from gkedeploy.errors import ConfigError
from gkedeploy.errors_catalog import actionable_error
from gkedeploy.models import DeployConfig


class ConfigLoader:
    """Loads the `.gkedeploy` file and validates required fields."""

    # Checked in this order; only the first missing field is reported.
    REQUIRED_FIELDS = (
        ("gcr_host", 'e.g. "us.gcr.io"'),
        ("project_id", "can be found in google console"),
        ("deployment_name", "can be found in google console"),
        ("cluster_name", "can be found in google console"),
        ("cluster_zone", 'e.g. "us-east1-d"'),
    )

    def __init__(self, logger):
        self.logger = logger

    def load(self, config_path: str) -> DeployConfig:
        parsed = self._read(config_path)

        values = {}
        for field, hint in self.REQUIRED_FIELDS:
            value = parsed.get(field)
            if value is None or value == "":
                raise ConfigError(actionable_error("missing_config_field", field=field, hint=hint))
            if not isinstance(value, str):
                raise ConfigError(actionable_error("invalid_config_field", field=field))
            values[field] = value

        known = {field for field, _ in self.REQUIRED_FIELDS}
        unknown = sorted(str(key) for key in set(parsed.keys()) - known)
        if unknown:
            self.logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

        return DeployConfig(**values)

    def _read(self, config_path: str) -> Dict[str, Any]:
        path = Path(config_path)
        if not path.is_file():
            raise ConfigError(actionable_error("config_not_found", path=config_path))

        try:
            parsed = self._parse(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError, UnicodeDecodeError) as exc:
            raise ConfigError(
                actionable_error("config_invalid", path=config_path, reason=str(exc))
            ) from exc

        if not isinstance(parsed, dict):
            raise ConfigError(
                actionable_error(
                    "config_invalid",
                    path=config_path,
                    reason="expected an object at the root",
                )
            )

        return parsed

    @staticmethod
    def _parse(text: str) -> Any:
        # YAML is accepted too; tab-indented JSON is not valid YAML, so try JSON first.
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return yaml.safe_load(text)
