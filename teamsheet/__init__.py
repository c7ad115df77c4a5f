"""
Teamsheet

Squad and formation assignment engine for a sports club's fixtures: players
are placed in position and substitute slots across the timed periods of
each team, substitutions are detected between periods, and selections are
saved as flat records.

This package provides the selection services and a Flask JSON API.
"""
__version__ = "1.0.0"
__author__ = "Teamsheet Development Team"

from .models import FixtureDefinition, Player, SelectionState
from .services import SelectionSession, ServiceFactory
from .ui import create_app, run_web_app
from .utils import APP_TITLE, StorageSettings, configure_logging

__all__ = [
    "FixtureDefinition", "Player", "SelectionState", "SelectionSession",
    "ServiceFactory", "create_app", "run_web_app", "APP_TITLE",
    "StorageSettings", "configure_logging"
]
