from pathlib import Path

import pandas as pd

from utils.config import load_config
from utils.logger import setup_logger
from utils.matrix import build_return_matrix
from utils.returns import compute_daily_returns

logger = setup_logger('preprocess')


def load_prices(file_path):
    """Read the long price CSV written by data_collection."""
    prices = pd.read_csv(file_path)
    prices['date'] = pd.to_datetime(prices['date'])
    return prices


def load_metadata(file_path):
    return pd.read_csv(file_path)


def preprocess_prices(file_path, start_date=None):
    """Prices CSV -> (long returns, wide return matrix)."""
    prices = load_prices(file_path)
    logger.info(f"Loaded {len(prices)} price rows for {prices['symbol'].nunique()} symbols from {file_path}")
    returns = compute_daily_returns(prices, start_date=start_date)
    return returns, build_return_matrix(returns)


def save_return_matrix(matrix: pd.DataFrame, file_path):
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    matrix.to_csv(file_path, index=True, index_label='symbol', date_format='%Y-%m-%d')
    return file_path


def load_return_matrix(file_path) -> pd.DataFrame:
    matrix = pd.read_csv(file_path, index_col='symbol')
    matrix.columns = pd.to_datetime(matrix.columns)
    return matrix


if __name__ == "__main__":
    config = load_config()
    _, matrix = preprocess_prices(Path(config['RAW_DIR']) / 'prices.csv', start_date=config['RETURNS_START_DATE'])
    output = save_return_matrix(matrix, Path(config['PROCESSED_DIR']) / 'return_matrix.csv')
    print("#"*50)
    print(f"Return matrix has been saved to {output}.")
    print("#"*50)
