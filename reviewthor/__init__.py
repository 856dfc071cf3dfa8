"""ReviewThor: AI pull request review GitHub App."""

__version__ = "0.1.0"
