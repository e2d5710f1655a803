"""Upload local files to Telegram with per-file routing and captions."""
__version__ = "0.1.0"
