"""PDF skills: reportlab for drawing, pypdf for reading, merging and writing."""
