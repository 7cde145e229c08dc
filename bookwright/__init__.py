"""Parse SUMMARY.md files, load Markdown books, and plan their preprocessing and rendering."""

__version__ = "0.1.0"