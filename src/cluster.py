"""Cluster a cached return matrix without recomputing returns."""

import sys
from pathlib import Path

from src.pipeline import cluster_matrix, write_outputs
from src.preprocess import load_metadata, load_return_matrix
from utils.config import load_config


def main():
    config = load_config()
    matrix_path = Path(config['PROCESSED_DIR']) / 'return_matrix.csv'

    try:
        matrix = load_return_matrix(matrix_path)
    except FileNotFoundError:
        print(f"Error: The file '{matrix_path}' was not found.")
        print("Run src/preprocess.py first to build the return matrix.")
        sys.exit(1)

    metadata = load_metadata(Path(config['RAW_DIR']) / 'metadata.csv')
    clustering, _, result = cluster_matrix(matrix, metadata, config)
    write_outputs(clustering, result, config)

    # summary
    print("\n--- Clustering Results ---")
    print(result.head())

    print("\n--- Cluster Sizes ---")
    print(result['cluster'].value_counts().sort_index())


if __name__ == "__main__":
    main()
