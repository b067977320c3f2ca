"""
Gradex Ingest

Reconciles Learn exam-submission exports against a class list and places one
anonymised, consistently named script per student into an output folder.
"""

__version__ = "0.1.0"
