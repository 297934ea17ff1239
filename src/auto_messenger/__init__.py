"""Automatic message sender: claims pending messages in batches and delivers them to a webhook."""

__version__ = "1.0.0"
