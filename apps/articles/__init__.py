"""
Articles app for Scriptorium.

Provides the Write panel: article storage, the edit/save lifecycle and the
editor's partial-rendering regions.
"""
