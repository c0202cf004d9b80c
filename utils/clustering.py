from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

import matplotlib.pyplot as plt
import pandas as pd
from sklearn.cluster import KMeans

from utils.errors import ClusterFitError, ConfigurationError
from utils.logger import setup_logger
from utils.matrix import feature_values

logger = setup_logger('clustering')


@dataclass(frozen=True)
class ClusterFit:
    """One K-Means run of the sweep."""
    center_count: int
    model: Any
    total_within_ss: float


class ReturnClustering:
    """
    Sweeps K-Means over a range of center counts on a symbol x date return matrix
    and keeps every fit for later selection.
    """
    def __init__(self, return_matrix, output_dir, min_clusters=1, max_clusters=30,
                 n_init=20, random_state=None, max_workers=1):
        self.return_matrix = return_matrix
        self.output_dir = Path(output_dir)
        self.min_clusters = min_clusters
        self.max_clusters = max_clusters
        self.n_init = n_init
        self.random_state = random_state
        self.max_workers = max_workers

        self.fits: Dict[int, ClusterFit] = {}

    def _validate_range(self):
        n_rows = len(self.return_matrix)
        if self.min_clusters < 1:
            raise ConfigurationError('min_clusters', f"must be at least 1, got {self.min_clusters}")
        if self.max_clusters < self.min_clusters:
            raise ConfigurationError(
                'max_clusters', f"{self.max_clusters} is below min_clusters={self.min_clusters}")
        if self.max_clusters > n_rows:
            raise ConfigurationError(
                'max_clusters', f"{self.max_clusters} centers requested but the matrix has only {n_rows} rows")
        if self.n_init < 1:
            raise ConfigurationError('n_init', f"must be at least 1, got {self.n_init}")

    def _fit_single(self, features, center_count):
        try:
            model = KMeans(n_clusters=center_count, n_init=self.n_init, random_state=self.random_state)
            model.fit(features)
        except Exception as e:
            raise ClusterFitError(center_count, e) from e
        return ClusterFit(center_count=center_count, model=model, total_within_ss=float(model.inertia_))

    def run_sweep(self) -> List[ClusterFit]:
        """
        Fits K-Means once per center count in [min_clusters, max_clusters].
        sklearn keeps the best of ``n_init`` restarts by inertia.
        """
        self._validate_range()
        features = feature_values(self.return_matrix)
        center_counts = range(self.min_clusters, self.max_clusters + 1)
        logger.info(f"Sweeping K-Means over {self.min_clusters}..{self.max_clusters} centers "
                    f"({self.n_init} restarts each) on {features.shape[0]} symbols")

        fits = {}
        if self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                future_to_count = {executor.submit(self._fit_single, features, k): k for k in center_counts}
                for future in as_completed(future_to_count):
                    fit = future.result()
                    fits[fit.center_count] = fit
        else:
            for k in center_counts:
                fits[k] = self._fit_single(features, k)

        self.fits = {k: fits[k] for k in center_counts}
        for fit in self.fits.values():
            logger.info(f"k={fit.center_count}: total within-cluster SS {fit.total_within_ss:.6f}")
        return list(self.fits.values())

    def scree_table(self) -> pd.DataFrame:
        """Total within-cluster sum of squares per center count."""
        return pd.DataFrame({
            'center_count': [fit.center_count for fit in self.fits.values()],
            'total_within_ss': [fit.total_within_ss for fit in self.fits.values()],
        })

    def plot_scree(self, selected=None):
        """Plots the scree curve used to judge a center count by eye."""
        scree = self.scree_table()
        self.output_dir.mkdir(parents=True, exist_ok=True)
        plt.figure(figsize=(10, 6))
        plt.plot(scree['center_count'], scree['total_within_ss'], 'bo-', linewidth=2, markersize=8)
        plt.title('K-Means Scree Plot')
        plt.xlabel('Number of Centers')
        plt.ylabel('Total Within-Cluster Sum of Squares')
        if selected is not None:
            plt.axvline(x=selected, color='red', linestyle='--', label=f'Selected: {selected} clusters')
            plt.legend()
        plt.grid(True, alpha=0.3)
        path = self.output_dir / "scree_plot.png"
        plt.savefig(path, dpi=300, bbox_inches='tight')
        plt.close()
        logger.info(f"Scree plot saved to {path}")
        return path

    def get_fit(self, center_count) -> ClusterFit:
        if center_count not in self.fits:
            swept = f"{min(self.fits)}..{max(self.fits)}" if self.fits else "nothing (sweep not run)"
            raise ConfigurationError('center_count', f"{center_count} has no sweep entry; swept {swept}")
        return self.fits[center_count]

    def assignments(self, center_count) -> pd.DataFrame:
        """Cluster label per symbol for the chosen center count."""
        fit = self.get_fit(center_count)
        return pd.DataFrame({
            'symbol': self.return_matrix.index.to_numpy(),
            'cluster': fit.model.labels_,
        })
