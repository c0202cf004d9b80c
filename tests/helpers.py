import pandas as pd


def make_prices(series: dict, start="2019-01-02") -> pd.DataFrame:
    """Long price table from {symbol: [prices...]} on consecutive business days."""
    frames = []
    for symbol, values in series.items():
        dates = pd.bdate_range(start, periods=len(values))
        frames.append(pd.DataFrame({"symbol": symbol, "date": dates, "adjusted": values}))
    return pd.concat(frames, ignore_index=True)
