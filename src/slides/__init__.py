"""Presentation skills built on python-pptx."""
