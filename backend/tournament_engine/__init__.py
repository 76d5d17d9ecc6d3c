"""Tournament structure engine: brackets, round robins, tennis results, standings and reports."""

__version__ = "0.1.0"
