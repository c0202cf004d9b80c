"""Shared fixtures for the return-clustering tests."""

import os
import tempfile

import matplotlib

matplotlib.use("Agg")

# module-level loggers are created at import time; keep their files out of the repo
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="return-clusters-logs-"))

import numpy as np
import pandas as pd
import pytest

from tests.helpers import make_prices
from utils.config import DEFAULTS


@pytest.fixture(autouse=True)
def _clean_config_env(monkeypatch):
    for key in DEFAULTS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def three_symbol_prices():
    """3 symbols x 5 days, no gaps, distinct return profiles."""
    return make_prices({
        "AAA": [100.0, 101.0, 102.5, 101.0, 103.0],
        "BBB": [50.0, 50.5, 51.3, 50.4, 51.5],
        "CCC": [20.0, 19.0, 18.5, 19.5, 18.0],
    })


@pytest.fixture()
def three_symbol_metadata():
    return pd.DataFrame({
        "symbol": ["AAA", "BBB", "CCC"],
        "company": ["Alpha Corp", "Beta Inc", "Gamma Ltd"],
        "sector": ["Information Technology", "Information Technology", "Energy"],
    })


@pytest.fixture()
def grouped_matrix():
    """
    6 symbols x 4 dates in two well separated groups.

    Rows are distinct so that 6 centers can reach zero within-cluster SS.
    """
    rng = np.random.default_rng(7)
    up = np.array([0.02, 0.01, 0.03, 0.02])
    down = -up
    rows = [up + rng.normal(0, 0.002, 4) for _ in range(3)] + [down + rng.normal(0, 0.002, 4) for _ in range(3)]
    return pd.DataFrame(
        rows,
        index=pd.Index(["U1", "U2", "U3", "D1", "D2", "D3"], name="symbol"),
        columns=pd.bdate_range("2020-01-02", periods=4),
    )
