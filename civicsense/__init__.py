"""Civic-Sense report triage & reconciliation engine.

Having this file ensures the 'civicsense' directory is recognized as a
standard Python package during test discovery and installation.
"""

__all__: list[str] = []
