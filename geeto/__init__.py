"""Geeto: resumable git flow automation with AI-assisted naming."""

__version__ = "0.1.0"
