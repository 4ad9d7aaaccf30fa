# src/exbook/config/__init__.py
"""
Configuration Module

Provides centralized configuration management using Pydantic Settings.
"""

from exbook.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
