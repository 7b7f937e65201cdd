"""Word document skills built on python-docx."""
