"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings

from .rounding import RoundingMode


class DecimalCoreConfig(BaseSettings):
    """Decimal engine configuration"""

    # Accumulator defaults
    default_scale: int = 0
    default_rounding_mode: str = "half_up"  # Any RoundingMode label

    # Scale used by average() and negative power()
    scientific_scale: int = 10

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    operation_logging: bool = True  # Emit accumulator log lines at DEBUG

    class Config:
        env_prefix = "DECIMAL_CORE_"
        env_file = ".env"
        case_sensitive = False

    @property
    def rounding_mode(self) -> RoundingMode:
        """Default rounding mode as an enum member"""
        return RoundingMode.of(self.default_rounding_mode)


# Global configuration instance
config = DecimalCoreConfig()


def get_config() -> DecimalCoreConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> DecimalCoreConfig:
    """Reload configuration from environment"""
    global config
    config = DecimalCoreConfig()
    return config
