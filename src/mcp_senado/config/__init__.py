"""
Configuration package for MCP Senado.
"""

from .settings import AppConfig, get_config, load_config, reload_config

__all__ = ["AppConfig", "get_config", "load_config", "reload_config"]
