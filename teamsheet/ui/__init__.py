"""
UI package for the Teamsheet selection engine.

This package contains the Flask JSON API server.
"""
from .web_app import create_app, run_web_app

__all__ = ["create_app", "run_web_app"]
