"""Daily percentage returns from long-format adjusted prices."""

import numpy as np
import pandas as pd

from utils.errors import DataIntegrityError
from utils.logger import setup_logger

PRICE_COLUMNS = ['symbol', 'date', 'adjusted']

logger = setup_logger('returns')


def _date_bound(start_date, dates):
    bound = pd.Timestamp(start_date)
    if dates.dt.tz is not None and bound.tzinfo is None:
        bound = bound.tz_localize(dates.dt.tz)
    return bound


def compute_daily_returns(prices: pd.DataFrame, start_date=None, strict: bool = False) -> pd.DataFrame:
    """
    Convert per-symbol adjusted prices into daily percentage returns.

    Parameters:
    -----------
    prices : pd.DataFrame
        Long table with columns symbol, date, adjusted
    start_date : str or datetime, optional
        Inclusive lower bound applied before any lag is taken
    strict : bool
        Raise DataIntegrityError on the first unusable price instead of
        logging and skipping it

    Returns:
    --------
    pd.DataFrame
        Columns symbol, date, pct_return. The first observation of each
        symbol has no predecessor and produces no row.
    """
    missing = [col for col in PRICE_COLUMNS if col not in prices.columns]
    if missing:
        raise DataIntegrityError(f"price table is missing columns {missing}")

    df = prices.loc[:, PRICE_COLUMNS].copy()
    df['date'] = pd.to_datetime(df['date'])
    df['adjusted'] = pd.to_numeric(df['adjusted'], errors='coerce')
    if start_date is not None:
        df = df[df['date'] >= _date_bound(start_date, df['date'])]

    df = df.sort_values(['symbol', 'date'], kind='mergesort').reset_index(drop=True)
    grouped = df.groupby('symbol', sort=False)
    df['previous'] = grouped['adjusted'].shift(1)

    # predecessor existence is positional, never inferred from a null previous price
    with_predecessor = df[grouped.cumcount() > 0]

    usable = (
        with_predecessor['previous'].gt(0)
        & np.isfinite(with_predecessor['previous'])
        & np.isfinite(with_predecessor['adjusted'])
    )
    rejected = with_predecessor[~usable]
    if not rejected.empty:
        first = rejected.iloc[0]
        if strict:
            raise DataIntegrityError(
                f"{first['symbol']} on {first['date']:%Y-%m-%d}: previous price {first['previous']!r}, "
                f"price {first['adjusted']!r}")
        logger.warning(
            f"Skipped {len(rejected)} rows with missing or non-positive prices "
            f"across symbols {sorted(rejected['symbol'].unique())}")

    kept = with_predecessor[usable]
    returns = pd.DataFrame({
        'symbol': kept['symbol'],
        'date': kept['date'],
        'pct_return': (kept['adjusted'] - kept['previous']) / kept['previous'],
    }).reset_index(drop=True)

    logger.info(f"Computed {len(returns)} daily returns for {returns['symbol'].nunique()} symbols")
    return returns
