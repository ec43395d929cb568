"""Client fund holdings tracker with batch fund-data refresh."""

__version__ = "0.1.0"
