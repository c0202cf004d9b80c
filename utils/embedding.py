"""2D UMAP projection of the return matrix."""

import pandas as pd
import umap

from utils.errors import ConfigurationError
from utils.logger import setup_logger
from utils.matrix import feature_values

logger = setup_logger('embedding')

MIN_ROWS = 3


def project_embedding(return_matrix: pd.DataFrame, n_neighbors=15, min_dist=0.1, random_state=None) -> pd.DataFrame:
    """
    Runs one UMAP pass over the numeric matrix and re-attaches each 2D
    coordinate to its symbol by row position.

    UMAP is stochastic: unless ``random_state`` is fixed, repeated calls give
    different layouts of the same data.
    """
    n_rows = len(return_matrix)
    if n_rows < MIN_ROWS:
        raise ConfigurationError('return_matrix', f"UMAP needs at least {MIN_ROWS} rows, got {n_rows}")

    neighbors = min(n_neighbors, n_rows - 1)
    # spectral init needs more points than neighbours
    init = 'spectral' if n_rows > n_neighbors else 'random'
    reducer = umap.UMAP(
        n_components=2,
        n_neighbors=neighbors,
        min_dist=min_dist,
        init=init,
        random_state=random_state,
    )
    coords = reducer.fit_transform(feature_values(return_matrix))
    logger.info(f"UMAP projected {n_rows} symbols (n_neighbors={neighbors}, init={init})")

    return pd.DataFrame({
        'symbol': return_matrix.index.to_numpy(),
        'v1': coords[:, 0],
        'v2': coords[:, 1],
    })
