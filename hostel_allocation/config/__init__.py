"""
Configuration package for the hostel allocation service.

This package contains the environment settings, database wiring
and logging configuration for the application.
"""

from hostel_allocation.config.settings import Settings, get_settings, settings
from hostel_allocation.config.database import Database, create_database

__all__ = ['Settings', 'get_settings', 'settings', 'Database', 'create_database']
