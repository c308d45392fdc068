"""Default configuration parameters for the stash snapshot tracker."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RemoteParams:
    """Stash provider connection parameters."""
    base_url: str = "https://api.pathofexile.com"
    league: str = "Standard"
    timeout_seconds: float = 30.0
    user_agent: str = "loothound/0.1.0"
    headers: dict = field(default_factory=dict)  # Extra request headers


@dataclass(frozen=True)
class StorageParams:
    """Local snapshot database parameters."""
    db_path: str = "loothound.db"
    busy_timeout_seconds: float = 30.0


@dataclass(frozen=True)
class PricingParams:
    """Valuation ruleset marker stamped on new snapshots."""
    revision: int = 1


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    format_json: bool = False
    include_caller: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    remote: RemoteParams
    storage: StorageParams
    pricing: PricingParams
    logging: LoggingParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        remote=RemoteParams(),
        storage=StorageParams(),
        pricing=PricingParams(),
        logging=LoggingParams(),
    )


def config_from_dict(data: dict) -> DefaultConfig:
    """Build a typed configuration from a merged configuration dict."""
    return DefaultConfig(
        remote=RemoteParams(**data.get("remote", {})),
        storage=StorageParams(**data.get("storage", {})),
        pricing=PricingParams(**data.get("pricing", {})),
        logging=LoggingParams(**data.get("logging", {})),
    )
