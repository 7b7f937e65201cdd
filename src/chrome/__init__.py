"""Browser-driven skills: monitoring, inspection, extraction and page automation."""
