"""Pydantic config schema and loader."""
from pathlib import Path
from typing import Optional
import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULTS_PATH = Path(__file__).with_name("defaults.yaml")


class VMConfig(BaseModel):
    max_instructions: int = 10_000
    seed: int = 0

    @field_validator("max_instructions")
    @classmethod
    def validate_budget(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_instructions must be positive")
        return v


class RenderConfig(BaseModel):
    width: int = 400
    height: int = 400
    dpi: int = 100
    background: str = "white"
    value_range: int = 64

    @field_validator("width", "height", "dpi", "value_range")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("canvas dimensions must be positive")
        return v


class MutationConfig(BaseModel):
    seed: Optional[int] = None
    indel_length: int = 1

    @field_validator("indel_length")
    @classmethod
    def validate_length(cls, v: int) -> int:
        if v < 1:
            raise ValueError("indel_length must be at least 1")
        return v


class OutputConfig(BaseModel):
    run_dir: Path = Path("runs")
    render: bool = True
    trace: bool = True


class ConfigSchema(BaseModel):
    vm: VMConfig = Field(default_factory=VMConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    mutation: MutationConfig = Field(default_factory=MutationConfig)
    outputs: OutputConfig = Field(default_factory=OutputConfig)


def load_config(path: Path = DEFAULTS_PATH) -> ConfigSchema:
    data = yaml.safe_load(Path(path).read_text()) or {}
    return ConfigSchema(**data)
