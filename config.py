import os
import yaml

from settings_schema import ConfigSchema, validate_config

APP_VERSION = "1.0.0"


class YamlConfig:
    """Load and save application config to a YAML file with env overrides."""

    ENV_PREFIX = "FITTRACK_"

    def __init__(self, path: str = "fittrack.yaml") -> None:
        self.path = path

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return data

    def save(self, data: dict) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(dict(data), f)

    def resolve(self) -> ConfigSchema:
        """Return the effective config: defaults, then file, then environment."""
        data = self.load()
        for key in ConfigSchema.model_fields:
            env_value = os.environ.get(f"{self.ENV_PREFIX}{key.upper()}")
            if env_value is not None:
                data[key] = env_value
        if "log_level" in data:
            data["log_level"] = str(data["log_level"]).upper()
        return validate_config(data)
