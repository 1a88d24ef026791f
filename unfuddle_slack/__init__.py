"""Posts Unfuddle project activity to Slack on a fixed interval."""

__version__ = "1.0.0"
