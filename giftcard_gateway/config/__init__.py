# Configuration package
"""
Configuration package for the gift card gateway
Exports settings helpers from settings.py for easy import
"""
from .settings import Settings, load_settings, validate_settings

__all__ = ["Settings", "load_settings", "validate_settings"]
