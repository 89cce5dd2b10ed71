"""
Folio configuration package.

Re-exports all public classes and functions.
"""

from config.grid_config import GridConfig, DEFAULTS, DEFAULT_CONFIG_PATH
