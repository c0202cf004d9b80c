"""Unit tests for constituent and price downloads; network calls are stubbed."""

import pandas as pd
import pytest

import src.data_collection as data_collection


CONSTITUENT_HTML = """
<table>
  <tr><th>Symbol</th><th>Security</th><th>GICS Sector</th><th>CIK</th></tr>
  <tr><td>AAPL</td><td>Apple Inc.</td><td>Information Technology</td><td>1</td></tr>
  <tr><td>BRK.B</td><td>Berkshire Hathaway</td><td>Financials</td><td>2</td></tr>
</table>
"""


class _Response:
    text = CONSTITUENT_HTML

    def raise_for_status(self):
        return None


class _Ticker:
    calls = 0

    def __init__(self, ticker):
        self.ticker = ticker

    def history(self, **kwargs):
        type(self).calls += 1
        assert kwargs["auto_adjust"] is True
        if self.ticker == "EMPTY":
            return pd.DataFrame()
        if self.ticker == "FLAKY":
            raise ConnectionError("timeout")
        index = pd.DatetimeIndex(
            ["2020-01-02 00:00", "2020-01-03 00:00"], tz="America/New_York", name="Date")
        return pd.DataFrame({"Close": [10.0, 11.0], "Volume": [100, 200]}, index=index)


@pytest.fixture(autouse=True)
def _stub_yfinance(monkeypatch):
    _Ticker.calls = 0
    monkeypatch.setattr(data_collection.yf, "Ticker", _Ticker)


def test_parse_constituents_maps_columns_and_symbols():
    table = pd.DataFrame({
        "Symbol": ["AAPL", "BF.B", "AAPL"],
        "Security": ["Apple Inc.", "Brown-Forman", "Apple Inc."],
        "GICS Sector": ["Information Technology", "Consumer Staples", "Information Technology"],
    })
    metadata = data_collection.parse_constituents(table)
    assert metadata.columns.tolist() == ["symbol", "company", "sector"]
    assert metadata["symbol"].tolist() == ["AAPL", "BF-B"]


def test_fetch_constituents_reads_first_table(monkeypatch):
    seen = {}

    def fake_get(url, headers, timeout):
        seen["url"] = url
        seen["agent"] = headers["User-Agent"]
        return _Response()

    monkeypatch.setattr(data_collection.requests, "get", fake_get)
    metadata = data_collection.fetch_constituents("https://example.test/sp500")
    assert seen["url"] == "https://example.test/sp500"
    assert seen["agent"].startswith("Mozilla")
    assert metadata["symbol"].tolist() == ["AAPL", "BRK-B"]
    assert metadata.loc[1, "sector"] == "Financials"


def test_single_ticker_returns_long_adjusted_prices():
    prices = data_collection.fetch_single_ticker("AAPL", "2020-01-01", "2020-01-31")
    assert prices.columns.tolist() == ["symbol", "date", "adjusted"]
    assert prices["adjusted"].tolist() == [10.0, 11.0]
    assert prices["date"].dt.tz is None
    assert prices["date"].iloc[0] == pd.Timestamp("2020-01-02")


def test_empty_history_gives_empty_frame():
    assert data_collection.fetch_single_ticker("EMPTY", "2020-01-01", "2020-01-31").empty


def test_failures_are_retried_then_given_up():
    prices = data_collection.fetch_single_ticker("FLAKY", "2020-01-01", "2020-01-31", max_retries=3, retry_delay=0)
    assert prices.empty
    assert _Ticker.calls == 3


def test_parallel_fetch_concatenates_and_skips_empty():
    prices = data_collection.fetch_multiple_tickers_parallel(
        ["MSFT", "EMPTY", "AAPL"], start="2020-01-01", end="2020-01-31", max_workers=2)
    assert prices["symbol"].tolist() == ["AAPL", "AAPL", "MSFT", "MSFT"]
