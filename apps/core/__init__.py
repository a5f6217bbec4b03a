"""
Core app for Scriptorium.

Provides the editor's shared machinery: callback registry, validators,
partial rendering, form tokens, privileges and error handling.
"""
