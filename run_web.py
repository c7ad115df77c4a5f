#!/usr/bin/env python3
"""
Main entry point for the Teamsheet web application.

This script launches the Flask-based JSON API server. Storage is configured
through the TEAMSHEET_* environment variables.
"""
import os

from teamsheet.ui.web_app import run_web_app
from teamsheet.utils import configure_logging

if __name__ == "__main__":
    configure_logging(os.environ.get("TEAMSHEET_LOG_LEVEL", "INFO"))
    # Serve a bundled client from the project root if there is one
    project_root = os.path.dirname(os.path.abspath(__file__))
    run_web_app(static_folder=project_root)
