"""Z-score / Z-ratio ranking of differentially expressed genes."""

__version__ = "0.1.0"
