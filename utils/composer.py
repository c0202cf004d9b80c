"""Joins cluster labels, UMAP coordinates and company metadata, and plots the result."""

import warnings
from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd
import plotly.graph_objects as go

from utils.errors import JoinMismatchError
from utils.logger import setup_logger

RESULT_COLUMNS = ['symbol', 'cluster', 'v1', 'v2', 'company', 'sector']

logger = setup_logger('composer')


def _report_unmatched(symbols, side):
    if not symbols:
        return
    message = f"{len(symbols)} clustered symbols have no {side}: {symbols[:10]}"
    logger.warning(message)
    warnings.warn(message, JoinMismatchError, stacklevel=3)


def compose_result(assignments: pd.DataFrame, embedding: pd.DataFrame, metadata: pd.DataFrame) -> pd.DataFrame:
    """
    Left-joins the assignment table with the embedding and company metadata.

    Every assigned symbol is kept: missing coordinates or metadata leave
    nulls in those columns and raise a JoinMismatchError warning.
    """
    metadata = metadata.loc[:, ['symbol', 'company', 'sector']]
    duplicated = metadata['symbol'].duplicated()
    if duplicated.any():
        logger.warning(f"Metadata lists {duplicated.sum()} duplicate symbols; keeping the first entry of each")
        metadata = metadata[~duplicated]
    embedding = embedding.loc[:, ['symbol', 'v1', 'v2']].drop_duplicates('symbol')

    result = (
        assignments.loc[:, ['symbol', 'cluster']]
        .merge(embedding, on='symbol', how='left', indicator='_embedded')
        .merge(metadata, on='symbol', how='left', indicator='_described')
    )
    _report_unmatched(result.loc[result['_embedded'] == 'left_only', 'symbol'].tolist(), 'embedding coordinates')
    _report_unmatched(result.loc[result['_described'] == 'left_only', 'symbol'].tolist(), 'company metadata')

    result = result[RESULT_COLUMNS]
    logger.info(f"Composed {len(result)} annotated symbols in {result['cluster'].nunique()} clusters")
    return result


def plot_clusters(result: pd.DataFrame, path, title='S&P 500 Return Clusters (UMAP)'):
    """Static scatter of the embedding coloured by cluster."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    plt.figure(figsize=(14, 9))
    scatter = plt.scatter(result['v1'], result['v2'], c=result['cluster'], cmap='tab20', s=40, alpha=0.8)
    plt.title(title)
    plt.xlabel('UMAP 1')
    plt.ylabel('UMAP 2')
    plt.colorbar(scatter, label='Cluster')
    plt.grid(True, alpha=0.3)
    plt.savefig(path, dpi=300, bbox_inches='tight')
    plt.close()
    logger.info(f"Cluster scatter saved to {path}")
    return path


def _hover_text(frame):
    return [
        f"{symbol}<br>{company}<br>{sector}<br>Cluster {cluster}"
        for symbol, company, sector, cluster in zip(
            frame['symbol'], frame['company'].fillna('n/a'), frame['sector'].fillna('n/a'), frame['cluster'])
    ]


def plot_clusters_interactive(result: pd.DataFrame, path, title='S&P 500 Return Clusters (UMAP)'):
    """Interactive scatter, one trace per cluster, with company and sector on hover."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig = go.Figure()
    for cluster, members in result.groupby('cluster', sort=True):
        fig.add_trace(go.Scatter(
            x=members['v1'],
            y=members['v2'],
            mode='markers',
            name=f'Cluster {cluster}',
            text=_hover_text(members),
            hoverinfo='text',
        ))
    fig.update_layout(title=title, xaxis_title='UMAP 1', yaxis_title='UMAP 2', template='plotly_white')
    fig.write_html(str(path))
    logger.info(f"Interactive cluster scatter saved to {path}")
    return fig
