"""Configuration classes for text transcoding.

This module provides configuration objects for the registry, the streaming
pipeline and the command-line output policy, plus an immutable aggregate that
round-trips through JSON.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

DEFAULT_CHUNK_SIZE = 8192
LOW_MEMORY_CHUNK_SIZE = 1024
HIGH_THROUGHPUT_CHUNK_SIZE = 1024 * 1024

EXIT_OK = 0
EXIT_FAULT = 1
EXIT_USAGE = 2


@dataclass
class StreamConfig:
    """Configuration for the streaming transcode pipeline."""

    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        """Validate stream configuration."""
        if not isinstance(self.chunk_size, int) or isinstance(self.chunk_size, bool):
            raise ValueError("chunk_size must be an integer")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")


@dataclass
class RegistryConfig:
    """Configuration for encoding name normalization."""

    # Rewrite leading "windows", "ibm" and "ibm code page" to "cp"
    alias_vendor_prefixes: bool = True


@dataclass
class OutputConfig:
    """Command-line output and exit-status policy."""

    input_encoding: str = "utf-8"
    output_encoding: str = "utf-8"
    newline_before_error: bool = True
    listing_exit_status: int = EXIT_USAGE

    def __post_init__(self) -> None:
        """Validate output configuration."""
        if not self.input_encoding:
            raise ValueError("input_encoding cannot be empty")
        if not self.output_encoding:
            raise ValueError("output_encoding cannot be empty")
        if not (0 <= self.listing_exit_status <= 255):
            raise ValueError("listing_exit_status must be between 0 and 255")
        if self.listing_exit_status == EXIT_FAULT:
            raise ValueError(
                f"listing_exit_status cannot be {EXIT_FAULT}, "
                "that status is reserved for transcode faults"
            )


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


_COMPONENTS = {
    "stream": StreamConfig,
    "registry": RegistryConfig,
    "output": OutputConfig,
}


@dataclass(frozen=True)
class TranscoderConfig:
    """Complete configuration for registry, pipeline and CLI.

    Immutable, so one instance can be shared by every invocation in a process.
    """

    stream: StreamConfig = field(default_factory=StreamConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Re-run component validation so that overrides are checked too."""
        try:
            self.stream.__post_init__()
            self.output.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "TranscoderConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Field overrides; nested fields use ``component__field``

        Returns:
            New TranscoderConfig instance with overrides applied

        Example:
            >>> config = TranscoderConfig().override(stream__chunk_size=4096)
            >>> config.stream.chunk_size
            4096
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=sorted(_COMPONENTS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = {}
        for component, overrides in nested_overrides.items():
            try:
                new_fields[component] = replace(getattr(self, component), **overrides)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=component) from e
        new_fields.update(top_level)

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {"name": self.name}
        for component in _COMPONENTS:
            value = getattr(self, component)
            result[component] = {
                name: getattr(value, name) for name in value.__dataclass_fields__
            }
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TranscoderConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected rather than silently ignored.
        """
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration must be an object")
        field_values: Dict[str, Any] = {}
        for key, value in data.items():
            if key == "name":
                field_values["name"] = value
                continue
            component_class = _COMPONENTS.get(key)
            if component_class is None:
                raise ConfigValidationError(
                    f"Unknown configuration section: {key}",
                    field_name=key,
                    suggestions=sorted(_COMPONENTS),
                )
            if not isinstance(value, dict):
                raise ConfigValidationError(
                    f"Configuration section {key} must be an object", field_name=key
                )
            try:
                field_values[key] = component_class(**value)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=key) from e
        return cls(**field_values)

    @classmethod
    def from_json(cls, json_str: str) -> "TranscoderConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def balanced(cls) -> "TranscoderConfig":
        """Default configuration."""
        return cls(name="balanced")

    @classmethod
    def low_memory(cls) -> "TranscoderConfig":
        """Small chunks for constrained environments."""
        return cls(stream=StreamConfig(chunk_size=LOW_MEMORY_CHUNK_SIZE), name="low_memory")

    @classmethod
    def high_throughput(cls) -> "TranscoderConfig":
        """Large chunks for bulk conversion of big files."""
        return cls(
            stream=StreamConfig(chunk_size=HIGH_THROUGHPUT_CHUNK_SIZE),
            name="high_throughput",
        )
