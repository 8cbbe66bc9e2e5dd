"""Data Alchemist Tools: validation and auto-fix for clients, workers and tasks data.

The package validates uploaded datasets, classifies each finding by how it can be
resolved, and applies safe corrections to one row or to every row sharing a defect.
The ``data-alchemist`` CLI drives it against stored sessions.
"""

__all__ = [
    "__version__",
]

__version__ = "0.1.0"
