"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic import Field
from pydantic_settings import BaseSettings
from typing import List, Optional

from .accounts import AccountSpec


DEFAULT_SEED_ACCOUNTS = [
    {"name": "Alice", "id": 1, "balance": 100},
    {"name": "Bob", "id": 2, "balance": 50},
    {"name": "Carol", "id": 3, "balance": 1000},
]


class AtmConfig(BaseSettings):
    """ATM simulator configuration"""
    
    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr
    
    # Business rules configuration
    allow_overdraft: bool = False
    cash_denomination: int = 20
    
    # Feature flags
    enable_audit_logging: bool = True
    
    # Accounts loaded into the ledger at startup, e.g.
    # ATM_SEED_ACCOUNTS='[{"name": "Alice", "id": 1, "balance": 100}]'
    seed_accounts: List[AccountSpec] = Field(
        default_factory=lambda: [AccountSpec(**spec) for spec in DEFAULT_SEED_ACCOUNTS]
    )
    
    class Config:
        env_prefix = "ATM_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = AtmConfig()


def get_config() -> AtmConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> AtmConfig:
    """Reload configuration from environment"""
    global config
    config = AtmConfig()
    return config
