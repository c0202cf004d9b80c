"""Exception types raised by the return-clustering pipeline."""


class PipelineError(Exception):
    """Base class for pipeline failures."""


class DataIntegrityError(PipelineError):
    """Input data cannot produce a valid return (bad or missing prices, duplicate keys)."""


class ConfigurationError(PipelineError):
    """A caller supplied an invalid parameter."""

    def __init__(self, parameter, message):
        self.parameter = parameter
        super().__init__(f"{parameter}: {message}")


class ClusterFitError(PipelineError):
    """K-Means failed for one center count."""

    def __init__(self, center_count, cause):
        self.center_count = center_count
        super().__init__(f"K-Means fit failed for center_count={center_count}: {cause}")


class JoinMismatchError(UserWarning):
    """Advisory: a clustered symbol has no matching row on the joined side."""
