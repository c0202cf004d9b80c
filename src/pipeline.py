"""Run the full return-clustering pipeline: returns, matrix, K-Means sweep, UMAP, annotated result."""

import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import List

import pandas as pd

from src.preprocess import load_metadata, load_prices, save_return_matrix
from utils.clustering import ClusterFit, ReturnClustering
from utils.composer import compose_result, plot_clusters, plot_clusters_interactive
from utils.config import load_config
from utils.embedding import project_embedding
from utils.logger import setup_logger, log_function_call
from utils.matrix import build_return_matrix
from utils.returns import compute_daily_returns

logger = setup_logger('pipeline')


@dataclass
class PipelineResult:
    returns: pd.DataFrame
    matrix: pd.DataFrame
    fits: List[ClusterFit]
    scree: pd.DataFrame
    embedding: pd.DataFrame
    result: pd.DataFrame
    clustering: ReturnClustering


@log_function_call(logger)
def cluster_matrix(matrix, metadata, config):
    """Sweep, embed and compose for an already built return matrix."""
    clustering = ReturnClustering(
        return_matrix=matrix,
        output_dir=config['OUTPUT_DIR'],
        min_clusters=config['MIN_CLUSTERS'],
        max_clusters=config['MAX_CLUSTERS'],
        n_init=config['N_INIT'],
        random_state=config['RANDOM_STATE'],
        max_workers=config['MAX_WORKERS'],
    )
    clustering.run_sweep()
    # validate the selection before paying for UMAP
    assignments = clustering.assignments(config['SELECTED_CLUSTERS'])

    embedding = project_embedding(
        matrix,
        n_neighbors=config['N_NEIGHBORS'],
        min_dist=config['MIN_DIST'],
        random_state=config['RANDOM_STATE'],
    )
    result = compose_result(assignments, embedding, metadata)
    return clustering, embedding, result


@log_function_call(logger)
def run_pipeline(prices, metadata, config) -> PipelineResult:
    returns = compute_daily_returns(prices, start_date=config['RETURNS_START_DATE'])
    matrix = build_return_matrix(returns)
    clustering, embedding, result = cluster_matrix(matrix, metadata, config)
    return PipelineResult(
        returns=returns,
        matrix=matrix,
        fits=list(clustering.fits.values()),
        scree=clustering.scree_table(),
        embedding=embedding,
        result=result,
        clustering=clustering,
    )


def write_outputs(clustering, result, config):
    output_dir = Path(config['OUTPUT_DIR'])
    output_dir.mkdir(parents=True, exist_ok=True)
    selected = config['SELECTED_CLUSTERS']

    clustering.plot_scree(selected=selected)
    clustering.scree_table().to_csv(output_dir / "scree.csv", index=False)
    result.to_csv(output_dir / f"kmeans_{selected}_umap_clusters.csv", index=False)
    plot_clusters(result, output_dir / f"kmeans_{selected}_umap_clusters.png")
    plot_clusters_interactive(result, output_dir / f"kmeans_{selected}_umap_clusters.html")
    logger.info(f"Outputs written to {output_dir}")


def main():
    # numba and UMAP emit FutureWarnings during fit
    warnings.filterwarnings('ignore', category=FutureWarning)
    config = load_config()
    raw_dir = Path(config['RAW_DIR'])
    try:
        prices = load_prices(raw_dir / 'prices.csv')
        metadata = load_metadata(raw_dir / 'metadata.csv')
        outcome = run_pipeline(prices, metadata, config)
        save_return_matrix(outcome.matrix, Path(config['PROCESSED_DIR']) / 'return_matrix.csv')
        write_outputs(outcome.clustering, outcome.result, config)
    except Exception as e:
        logger.critical(f"Pipeline failed: {e}")
        raise

    print("\n--- Annotated Results ---")
    print(outcome.result.head())

    print("\n--- Cluster Sizes ---")
    print(outcome.result['cluster'].value_counts().sort_index())


if __name__ == "__main__":
    main()
