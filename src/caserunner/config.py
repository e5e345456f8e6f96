"""Configuration management for caserunner."""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class FormatConfig(BaseModel):
    """Display name formatting."""

    max_string_length: int = Field(
        default=50, description="String arguments longer than this are truncated in display names"
    )
    locale_aware: bool = Field(
        default=False, description="Format numeric arguments with the current locale instead of invariantly"
    )

    @field_validator("max_string_length")
    @classmethod
    def validate_max_string_length(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_string_length must be at least 1")
        return v


class ExecutionConfig(BaseModel):
    """Test case execution configuration."""

    isolate_threads: bool = Field(
        default=True, description="Run each test case on its own dedicated worker thread"
    )
    thread_name_prefix: str = Field(default="caserunner-worker", description="Name prefix for worker threads")


class OutputConfig(BaseModel):
    """How lifecycle messages are rendered."""

    format: str = Field(default="console", description="Output format (console, json)")
    show_stages: bool = Field(
        default=False, description="Show construction, hook, invocation and dispose stages"
    )

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        allowed = {"console", "json"}
        if v.lower() not in allowed:
            raise ValueError(f"Format must be one of: {allowed}")
        return v.lower()


class RunnerConfig(BaseModel):
    """Main configuration for caserunner."""

    format: FormatConfig = Field(default_factory=FormatConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    log_level: str = Field(default="WARNING", description="Logging level name")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_file(cls, path: Path | str) -> "RunnerConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        return cls.model_validate(data)

    @classmethod
    def find_and_load(cls, start_dir: Path | str | None = None) -> "RunnerConfig":
        """Find and load configuration file, searching up the directory tree."""
        if start_dir is None:
            start_dir = Path.cwd()
        else:
            start_dir = Path(start_dir)

        config_names = ["caserunner.json", ".caserunner.json"]

        current = start_dir.resolve()
        for directory in [current, *current.parents]:
            for name in config_names:
                config_path = directory / name
                if config_path.exists():
                    return cls.from_file(config_path)

        raise FileNotFoundError(
            "No configuration file found. Create caserunner.json or run 'caserunner init'"
        )

    def to_file(self, path: Path | str) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)


def get_default_config() -> RunnerConfig:
    """Return a default configuration."""
    return RunnerConfig()


def create_example_config(output_path: Path | str) -> Path:
    """Create an example configuration file."""
    output_path = Path(output_path)
    config = get_default_config()
    config.output.show_stages = True
    config.to_file(output_path)
    return output_path
