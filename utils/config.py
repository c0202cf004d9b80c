"""Pipeline configuration read from the environment (and an optional .env file)."""

import os
from dotenv import load_dotenv

from utils.errors import ConfigurationError

SP500_URL = 'https://en.wikipedia.org/wiki/List_of_S%26P_500_companies'

DEFAULTS = {
    'TICKER_URL': SP500_URL,
    'START_DATE': '2017-01-01',
    'END_DATE': None,
    'RETURNS_START_DATE': '2018-01-01',
    'RAW_DIR': './data/raw',
    'PROCESSED_DIR': './data/processed',
    'OUTPUT_DIR': './output',
    'MIN_CLUSTERS': 1,
    'MAX_CLUSTERS': 30,
    'N_INIT': 20,
    'SELECTED_CLUSTERS': 10,
    'RANDOM_STATE': None,
    'MAX_WORKERS': 1,
    'N_NEIGHBORS': 15,
    'MIN_DIST': 0.1,
}

INT_KEYS = ('MIN_CLUSTERS', 'MAX_CLUSTERS', 'N_INIT', 'SELECTED_CLUSTERS', 'RANDOM_STATE',
            'MAX_WORKERS', 'N_NEIGHBORS')
FLOAT_KEYS = ('MIN_DIST',)


def _convert(key, raw):
    if key in INT_KEYS:
        cast = int
    elif key in FLOAT_KEYS:
        cast = float
    else:
        return raw
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(key, f"expected {cast.__name__}, got {raw!r}") from None


def load_config(env_file=".env", **overrides):
    """
    Build the CONFIG dictionary.

    Precedence: keyword overrides, then environment variables (after loading
    ``env_file`` without overriding variables already set), then DEFAULTS.
    """
    if env_file and os.path.exists(env_file):
        load_dotenv(env_file)

    config = {}
    for key, default in DEFAULTS.items():
        raw = os.getenv(key)
        config[key] = default if raw in (None, '') else _convert(key, raw)

    for key, value in overrides.items():
        if key not in DEFAULTS:
            raise ConfigurationError(key, "unknown configuration key")
        config[key] = value

    if config['MIN_CLUSTERS'] > config['SELECTED_CLUSTERS'] or config['SELECTED_CLUSTERS'] > config['MAX_CLUSTERS']:
        raise ConfigurationError(
            'SELECTED_CLUSTERS',
            f"{config['SELECTED_CLUSTERS']} is outside the swept range "
            f"{config['MIN_CLUSTERS']}..{config['MAX_CLUSTERS']}")
    return config
