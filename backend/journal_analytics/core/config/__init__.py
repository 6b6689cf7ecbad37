"""
Configuration package initialization.

This module provides centralized access to application settings and constants.
Settings are read through ``get_settings()`` on every use, so environment
changes followed by ``Settings.reload()`` are picked up.
"""

from .settings import Settings, get_settings
from .constants import analytics_constants

__all__ = [
    'Settings',
    'get_settings',
    'analytics_constants',
]
