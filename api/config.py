"""
Site configuration for the FastAPI API server.

Everything is read from folio_config.json in one pass at import time:
the ``site`` section (admin password, upload directory, CORS origins,
reveal session cap), the engine sections wrapped in GridConfig, and the
JWT signing secret.
"""

import os
import json
import shutil
import secrets

from config import GridConfig, DEFAULT_CONFIG_PATH

SITE_DEFAULTS = {
    'password': '',
    'upload_dir': 'public/uploads',
    'max_sessions': 1000,
    'cors_origins': ['http://localhost:3000', 'http://localhost:5000'],
}

JWT_ALGORITHM = "HS256"
JWT_EXPIRY_HOURS = 48


def _read_config_file(path):
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError as e:
        print(f"Warning: ignoring unreadable {path}: {e}")
        return {}


def _ensure_share_secret(config, path):
    """Return the JWT secret, generating one when the config has none.

    A generated secret is written back (after a .backup copy) so tokens
    survive restarts. Without a config file it lives for this process only.
    """
    if config.get('share_secret'):
        return config['share_secret']
    config['share_secret'] = secrets.token_hex(32)
    if os.path.exists(path):
        shutil.copy2(path, f"{path}.backup")
        with open(path, 'w') as f:
            json.dump(config, f, indent=2)
    return config['share_secret']


def load_site_config(config):
    """``site`` section of ``config`` with SITE_DEFAULTS filled in."""
    site = dict(SITE_DEFAULTS)
    site.update(config.get('site', {}))
    return site


FULL_CONFIG = _read_config_file(DEFAULT_CONFIG_PATH)
JWT_SECRET = _ensure_share_secret(FULL_CONFIG, DEFAULT_CONFIG_PATH)
SITE_CONFIG = load_site_config(FULL_CONFIG)
GRID_CONFIG = GridConfig(config=FULL_CONFIG)


def is_password_required():
    """Whether write endpoints need a login."""
    return bool(SITE_CONFIG.get('password'))


def reload_config():
    """Re-read folio_config.json.

    SITE_CONFIG is updated in place so modules holding a reference to it
    see the new values.
    """
    global FULL_CONFIG, JWT_SECRET, GRID_CONFIG
    FULL_CONFIG = _read_config_file(DEFAULT_CONFIG_PATH)
    JWT_SECRET = _ensure_share_secret(FULL_CONFIG, DEFAULT_CONFIG_PATH)
    SITE_CONFIG.clear()
    SITE_CONFIG.update(load_site_config(FULL_CONFIG))
    GRID_CONFIG = GridConfig(config=FULL_CONFIG)
