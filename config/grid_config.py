"""
Folio grid configuration.

Contains GridConfig, which loads the layout engine settings from
folio_config.json and fills in defaults for anything missing.
"""

import os
import json

DEFAULT_CONFIG_PATH = os.environ.get(
    'FOLIO_CONFIG',
    os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'folio_config.json'),
)

DEFAULTS = {
    'grid': {
        'row_height_px': 300,
        'mobile_breakpoint_px': 768,
        'reveal': {
            'threshold': 0.1,
            'root_margin_px': 50,
            'stagger_ms': 50,
        },
    },
    'resolver': {
        'max_concurrency': None,
        'timeout_seconds': 10,
    },
}


class GridConfig:
    """Loads and manages grid layout configuration from a JSON file.

    A missing file is not an error: every setting has a default.
    """

    def __init__(self, config_path=None, config=None):
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        loaded = config if config is not None else self._load_config()
        self.config = self._merge_configs(DEFAULTS, loaded)

    def _load_config(self):
        """Load config from file.

        Raises:
            ValueError: If the file exists but is not valid JSON
        """
        if not os.path.exists(self.config_path):
            return {}
        try:
            with open(self.config_path, 'r') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Could not load config from {self.config_path}: {e}")

    def _merge_configs(self, base, override):
        """Deep merge override into base config."""
        result = dict(base)
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value
        return result

    def get_grid_settings(self):
        """Get row height and mobile breakpoint."""
        grid = self.config['grid']
        return {
            'row_height_px': grid['row_height_px'],
            'mobile_breakpoint_px': grid['mobile_breakpoint_px'],
        }

    def get_reveal_settings(self):
        """Get reveal threshold, margin and per-image stagger."""
        return dict(self.config['grid']['reveal'])

    def get_resolver_settings(self):
        """Get dimension resolver settings.

        max_concurrency of None (or 0) means no cap on in-flight loads.
        """
        resolver = dict(self.config['resolver'])
        if not resolver.get('max_concurrency'):
            resolver['max_concurrency'] = None
        return resolver
