"""Wide symbol x date return matrix."""

import numpy as np
import pandas as pd

from utils.errors import DataIntegrityError
from utils.logger import setup_logger

logger = setup_logger('matrix')


def build_return_matrix(returns: pd.DataFrame) -> pd.DataFrame:
    """
    Pivot long returns into one row per symbol and one column per date.

    A (symbol, date) pair absent from ``returns`` is filled with 0.0, read as
    "no movement" so that every row is a complete vector for K-Means and UMAP.
    """
    if returns.empty:
        raise DataIntegrityError("cannot build a return matrix from an empty return table")
    if returns['pct_return'].isna().any():
        raise DataIntegrityError("return table contains missing pct_return values")

    duplicated = returns.duplicated(['symbol', 'date'])
    if duplicated.any():
        pairs = returns.loc[duplicated, ['symbol', 'date']].head(5).to_records(index=False).tolist()
        raise DataIntegrityError(f"duplicate (symbol, date) pairs in return table, e.g. {pairs}")

    matrix = (
        returns.pivot(index='symbol', columns='date', values='pct_return')
        .sort_index()
        .sort_index(axis=1)
        .fillna(0.0)
    )
    matrix.columns.name = None

    filled = matrix.size - len(returns)
    logger.info(f"Return matrix: {matrix.shape[0]} symbols x {matrix.shape[1]} dates, {filled} cells filled with 0.0")
    return matrix


def feature_values(matrix: pd.DataFrame) -> np.ndarray:
    """Dense float array of the matrix; row i belongs to ``matrix.index[i]``."""
    return matrix.to_numpy(dtype=float)
