from typing import Literal

from pydantic import BaseModel, Field, ValidationError


class SettingsSchema(BaseModel):
    unit_system: Literal["imperial", "metric"] = "imperial"
    theme: Literal["system", "light", "dark"] = "system"
    language: Literal["en"] = "en"
    data_version: int = Field(default=1, ge=1)
    privacy_acknowledged: bool = False
    default_rest_time_seconds: int = Field(default=90, ge=0)
    auto_save_workouts: bool = True
    weight_increment_lb: float = Field(default=5.0, gt=0)
    weight_increment_kg: float = Field(default=2.5, gt=0)


class ConfigSchema(BaseModel):
    db_path: str = "fittrack.db"
    autosave_interval: float = Field(default=30.0, gt=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))


def validate_config(data: dict) -> ConfigSchema:
    try:
        return ConfigSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
