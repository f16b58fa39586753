"""Star History DB - resumable star-history scraping for GitHub repositories."""

__version__ = "0.1.0"
