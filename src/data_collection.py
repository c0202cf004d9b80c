import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from io import StringIO

import pandas as pd
import requests
import yfinance as yf

from utils.config import load_config
from utils.logger import setup_logger, log_function_call

HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
                  "AppleWebKit/537.36 (KHTML, like Gecko) "
                  "Chrome/129.0.0.0 Safari/537.36"
}

# logging
logger = setup_logger('download')


def parse_constituents(table: pd.DataFrame) -> pd.DataFrame:
    """Map the constituent table to symbol/company/sector, with Yahoo-style symbols."""
    metadata = table.rename(columns={'Symbol': 'symbol', 'Security': 'company', 'GICS Sector': 'sector'})
    metadata = metadata[['symbol', 'company', 'sector']].copy()
    metadata['symbol'] = metadata['symbol'].str.strip().str.replace('.', '-', regex=False)
    return metadata.drop_duplicates('symbol').reset_index(drop=True)


@log_function_call(logger)
def fetch_constituents(url, timeout=30):
    """Download the index constituent table (first HTML table on the page)."""
    response = requests.get(url, headers=HEADERS, timeout=timeout)
    response.raise_for_status()
    tables = pd.read_html(StringIO(response.text))
    metadata = parse_constituents(tables[0])
    logger.info(f"Found {len(metadata)} constituents")
    return metadata


def fetch_single_ticker(ticker, start, end, interval='1d', timeout=60, max_retries=3, retry_delay=5):
    """Fetch adjusted daily closes for a single ticker with retries."""
    attempt = 0
    while attempt < max_retries:
        try:
            logger.info(f"Fetching data for {ticker}")
            data = yf.Ticker(ticker).history(start=start, end=end, interval=interval,
                                             auto_adjust=True, timeout=timeout)

            if data is None or data.empty:
                logger.warning(f"No data found for {ticker}")
                return pd.DataFrame(columns=['symbol', 'date', 'adjusted'])

            dates = pd.to_datetime(data.index)
            if dates.tz is not None:
                dates = dates.tz_localize(None)
            prices = pd.DataFrame({
                'symbol': ticker,
                'date': dates.normalize(),
                'adjusted': data['Close'].to_numpy(),
            })
            logger.info(f"Successfully fetched {len(prices)} rows for {ticker}")
            return prices

        except Exception as e:
            logger.error(f"Error fetching {ticker} on attempt {attempt + 1}: {e}")
            attempt += 1
            if attempt < max_retries:
                time.sleep(retry_delay)

    logger.error(f"Failed to fetch {ticker} after {max_retries} attempts")
    return pd.DataFrame(columns=['symbol', 'date', 'adjusted'])


@log_function_call(logger)
def fetch_multiple_tickers_parallel(ticker_list, start, end, interval='1d', timeout=60, max_workers=10, **kwargs):
    """Fetch multiple tickers in parallel."""
    results = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_ticker = {
            executor.submit(fetch_single_ticker, ticker, start, end, interval, timeout, **kwargs): ticker
            for ticker in ticker_list
        }

        for future in as_completed(future_to_ticker):
            ticker = future_to_ticker[future]
            data = future.result()
            if not data.empty:
                results.append(data)
            else:
                logger.warning(f"No data returned for {ticker}")

    if results:
        final_df = pd.concat(results, ignore_index=True).sort_values(['symbol', 'date']).reset_index(drop=True)
        logger.info(f"Fetched total {len(final_df)} rows across {len(results)} tickers.")
        return final_df

    logger.warning("No data fetched for any ticker.")
    return pd.DataFrame(columns=['symbol', 'date', 'adjusted'])


@log_function_call(logger)
def main():
    config = load_config()
    try:
        metadata = fetch_constituents(config['TICKER_URL'])
        logger.info(f"Fetching data from {config['START_DATE']} to {config['END_DATE']} for {len(metadata)} tickers.")
        prices = fetch_multiple_tickers_parallel(
            metadata['symbol'].tolist(), start=config['START_DATE'], end=config['END_DATE'])

        os.makedirs(config['RAW_DIR'], exist_ok=True)
        metadata_path = os.path.join(config['RAW_DIR'], 'metadata.csv')
        prices_path = os.path.join(config['RAW_DIR'], 'prices.csv')
        metadata.to_csv(metadata_path, index=False)
        prices.to_csv(prices_path, index=False)
        logger.info(f"Data saved to {prices_path} and {metadata_path}")

    except Exception as e:
        logger.critical(f"Critical error in main execution: {e}")
        raise


if __name__ == "__main__":
    main()
