"""
Cowork Skills

Command-line automation skills for everyday office work:
- Browser automation (dashboard monitoring, scraping, forms, page checks)
- Spreadsheets, presentations and Word documents
- PDF annotation, templating and merging
"""

__version__ = "0.1.0"
