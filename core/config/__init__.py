#!/usr/bin/env python3
"""Configuration for the crowdfunding service

Configuration hierarchy:
- crowdfunding_config: Ledger collaborators (payment service, factory owner, events)
- logging_config: Logging configuration
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .crowdfunding_config import CrowdfundingConfig


def load_environment(env_file: str = None) -> bool:
    """Load ``ENV_FILE`` (default ``.env``) if present; real env vars win"""
    env_file = env_file or os.getenv("ENV_FILE", ".env")
    return load_dotenv(env_file, override=False)


load_environment()

# Create global settings instance
settings = CrowdfundingConfig.from_env()

def get_settings() -> CrowdfundingConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> CrowdfundingConfig:
    """Reload settings from environment"""
    global settings
    settings = CrowdfundingConfig.from_env()
    return settings

__all__ = [
    'CrowdfundingConfig',
    'LoggingConfig',
    'get_settings',
    'load_environment',
    'reload_settings',
    'settings',
]
