"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ConfigIssue:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_remote_params(params: dict[str, Any]) -> list[ConfigIssue]:
        """Validate stash provider parameters."""
        errors = []

        if "base_url" in params:
            value = params["base_url"]
            parsed = urlparse(value) if isinstance(value, str) else None
            if not parsed or parsed.scheme not in ("http", "https") or not parsed.netloc:
                errors.append(ConfigIssue(
                    field="remote.base_url",
                    message="Must be an http(s) URL",
                    value=value
                ))

        if "league" in params:
            value = params["league"]
            if not isinstance(value, str) or not value.strip():
                errors.append(ConfigIssue(
                    field="remote.league",
                    message="Must be a non-empty string",
                    value=value
                ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                errors.append(ConfigIssue(
                    field="remote.timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "headers" in params and not isinstance(params["headers"], dict):
            errors.append(ConfigIssue(
                field="remote.headers",
                message="Must be a mapping of header names to values",
                value=params["headers"]
            ))

        return errors

    @staticmethod
    def validate_storage_params(params: dict[str, Any]) -> list[ConfigIssue]:
        """Validate database parameters."""
        errors = []

        if "db_path" in params:
            value = params["db_path"]
            if not isinstance(value, str) or not value:
                errors.append(ConfigIssue(
                    field="storage.db_path",
                    message="Must be a non-empty path",
                    value=value
                ))

        if "busy_timeout_seconds" in params:
            value = params["busy_timeout_seconds"]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                errors.append(ConfigIssue(
                    field="storage.busy_timeout_seconds",
                    message="Must be a non-negative number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_pricing_params(params: dict[str, Any]) -> list[ConfigIssue]:
        """Validate pricing revision."""
        errors = []

        if "revision" in params:
            value = params["revision"]
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                errors.append(ConfigIssue(
                    field="pricing.revision",
                    message="Must be a non-negative integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ConfigIssue]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in LOG_LEVELS:
                errors.append(ConfigIssue(
                    field="logging.level",
                    message=f"Must be one of {', '.join(LOG_LEVELS)}",
                    value=value
                ))

        return errors

    @classmethod
    def validate_config(cls, config: dict[str, Any]) -> list[ConfigIssue]:
        """Validate a complete merged configuration."""
        errors = []

        if "remote" in config:
            errors.extend(cls.validate_remote_params(config["remote"]))
        if "storage" in config:
            errors.extend(cls.validate_storage_params(config["storage"]))
        if "pricing" in config:
            errors.extend(cls.validate_pricing_params(config["pricing"]))
        if "logging" in config:
            errors.extend(cls.validate_logging_params(config["logging"]))

        return errors
