"""Sales task tracker: normalization, metrics and an in-memory task store."""

__version__ = "0.1.0"
