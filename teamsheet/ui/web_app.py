"""
Web application module for the Teamsheet selection engine.

This module contains the Flask server exposing the selection session as JSON
API endpoints. Pitch rendering belongs to the client.
"""
import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request, send_from_directory

from .. import __version__
from ..models import (
    FixtureDefinition, Player, StaticRosterProvider, StorageError,
    UnknownPeriodError, UnknownTeamError
)
from ..models.formation import FormationTemplates
from ..services import SelectionSession, ServiceFactory
from ..services.drag_drop import DropResult
from ..utils import APP_TITLE, StorageSettings
from ..utils.constants import DEFAULT_HOST, DEFAULT_PORT

logger = logging.getLogger(__name__)


class WebAppState:
    """
    State holder for the web application.

    Holds the service factory and the session of the fixture being edited.
    """

    def __init__(self, settings: Optional[StorageSettings] = None):
        self.reset(settings)

    def reset(self, settings: Optional[StorageSettings] = None) -> None:
        """Drop the current session and rebuild the factory for new settings."""
        self.roster = StaticRosterProvider()
        self.service_factory = ServiceFactory(settings, roster=self.roster)
        self.session: Optional[SelectionSession] = None

    def require_session(self) -> SelectionSession:
        if self.session is None:
            raise NoFixtureError("No fixture has been set up")
        return self.session


class NoFixtureError(Exception):
    """Raised when an endpoint needs a fixture before one was set up."""


# Global state instance
app_state = WebAppState()


# ---------- Serialization helpers ---------- #

def _assignments_payload(assignments) -> Dict[str, dict]:
    return {slot.key: assignment.to_dict() for slot, assignment in assignments.items()}


def _drop_payload(result: DropResult) -> Dict[str, Any]:
    return {
        "status": result.status.value,
        "player_id": result.player_id,
        "target": result.target,
        "source": result.source,
        "displaced_player": result.displaced_player,
        "assignments": _assignments_payload(result.assignments),
    }


def _failure(result, status_code: int = 400):
    error = result.error.value if result.error is not None else None
    return jsonify({"success": False, "error": result.message, "code": error}), status_code


def _state_payload(session: SelectionSession) -> Dict[str, Any]:
    snapshot = session.snapshot()
    teams = []
    for team in snapshot.ordered_teams():
        data = team.to_dict()
        data["periods"] = session.period_summaries(team.id)
        data["captain"] = snapshot.captains.get(team.id)
        data["total_minutes"] = session.periods.total_minutes(team.id)
        teams.append(data)
    return {
        "fixture_id": snapshot.fixture_id,
        "teams": teams,
        "assignments": {
            str(team_id): {
                period_id: {slot_key: a.to_dict() for slot_key, a in slots.items()}
                for period_id, slots in periods.items()
            }
            for team_id, periods in snapshot.assignment_map().items()
        },
        "can_undo": session.can_undo,
        "can_redo": session.can_redo,
        "is_saving": session.is_saving,
    }


def _body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def create_app(static_folder: str = ".", settings: Optional[StorageSettings] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        static_folder: Directory to serve a client's index.html from
        settings: Storage settings; replaces the current app state when given

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__, static_folder=static_folder, static_url_path="")
    if settings is not None:
        app_state.reset(settings)

    @app.errorhandler(NoFixtureError)
    def handle_no_fixture(e):
        return jsonify({"success": False, "error": str(e)}), 409

    @app.errorhandler(UnknownTeamError)
    @app.errorhandler(UnknownPeriodError)
    def handle_unknown(e):
        return jsonify({"success": False, "error": str(e)}), 404

    @app.errorhandler(StorageError)
    def handle_storage(e):
        logger.error("Storage failure: %s", e)
        return jsonify({"success": False, "error": str(e)}), 502

    @app.route("/")
    def index():
        """Serve the client if one is bundled, else describe the API."""
        if os.path.exists(os.path.join(static_folder, "index.html")):
            response = send_from_directory(static_folder, "index.html")
            response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
            return response
        return jsonify({"success": True, "app": APP_TITLE, "version": __version__})

    # ==================== Fixture & State ==================== #

    @app.route("/api/fixture", methods=["POST"])
    def setup_fixture():
        """Start a new selection session for a fixture."""
        data = _body()
        try:
            fixture = FixtureDefinition.from_dict(data)
            for category, players in (data.get("players") or {}).items():
                app_state.roster.add_players(category, [Player.from_dict(p) for p in players])
        except (KeyError, TypeError, ValueError) as e:
            return jsonify({"success": False, "error": f"Invalid fixture: {e}"}), 400

        app_state.session = app_state.service_factory.create_session(fixture)
        return jsonify({"success": True, "state": _state_payload(app_state.session)})

    @app.route("/api/state", methods=["GET"])
    def get_state():
        """Snapshot of the whole selection."""
        session = app_state.require_session()
        return jsonify({"success": True, "state": _state_payload(session)})

    @app.route("/api/formations", methods=["GET"])
    def get_formations():
        fixture_format = request.args.get("format")
        return jsonify({
            "success": True,
            "default_slots": [slot.key for slot in FormationTemplates.default_slots(fixture_format)],
            "templates": [t.to_dict() for t in FormationTemplates.get_templates(fixture_format)],
        })

    # ==================== Squads ==================== #

    @app.route("/api/teams/<int:team_id>/players", methods=["GET"])
    def get_team_players(team_id):
        """Roster players for the team's category, plus the current squad."""
        session = app_state.require_session()
        return jsonify({
            "success": True,
            "available": [p.to_dict() for p in session.available_players(team_id)],
            "squad": sorted(session.squads.squad_of(team_id)),
        })

    @app.route("/api/teams/<int:team_id>/squad", methods=["PUT"])
    def set_squad(team_id):
        session = app_state.require_session()
        player_ids = _body().get("player_ids")
        if not isinstance(player_ids, list):
            return jsonify({"success": False, "error": "player_ids must be a list"}), 400
        pruned = session.set_squad(team_id, player_ids)
        return jsonify({
            "success": True,
            "squad": sorted(session.squads.squad_of(team_id)),
            "pruned": [{"period_id": period_id, "slot": slot} for period_id, slot in pruned],
        })

    @app.route("/api/teams/<int:team_id>/captain", methods=["PUT"])
    def set_captain(team_id):
        session = app_state.require_session()
        result = session.set_captain(team_id, _body().get("player_id"))
        if not result.ok:
            return _failure(result)
        return jsonify({"success": True, "captain": result.value})

    @app.route("/api/players/<player_id>/teams", methods=["GET"])
    def get_player_teams(player_id):
        """Teams whose squad already includes the player."""
        session = app_state.require_session()
        return jsonify({"success": True, "teams": sorted(session.teams_containing(player_id))})

    # ==================== Assignments ==================== #

    @app.route("/api/teams/<int:team_id>/periods/<period_id>/assign", methods=["POST"])
    def assign_player(team_id, period_id):
        session = app_state.require_session()
        data = _body()
        if "slot" not in data:
            return jsonify({"success": False, "error": "slot is required"}), 400
        result = session.assign(team_id, period_id, data["slot"], data.get("player_id"), data.get("position_label"))
        if not result.ok:
            return _failure(result)
        return jsonify({
            "success": True,
            "status": result.status.value,
            "previous_occupant": result.previous_occupant,
            "moved_from": result.moved_from,
            "assignments": _assignments_payload(session.store.get(team_id, period_id)),
        })

    @app.route("/api/teams/<int:team_id>/periods/<period_id>/slots/<slot>", methods=["DELETE"])
    def remove_player(team_id, period_id, slot):
        session = app_state.require_session()
        result = session.remove(team_id, period_id, slot)
        removed = result.value
        return jsonify({
            "success": True,
            "removed": removed.player_id if removed is not None else None,
            "assignments": _assignments_payload(session.store.get(team_id, period_id)),
        })

    @app.route("/api/teams/<int:team_id>/periods/<period_id>/drop", methods=["POST"])
    def drop_player(team_id, period_id):
        """Drop a player on a slot; a player coming from a slot swaps with the occupant."""
        session = app_state.require_session()
        data = _body()
        if "target" not in data or "player_id" not in data:
            return jsonify({"success": False, "error": "target and player_id are required"}), 400
        result = session.drop(
            team_id, period_id, data["target"], data["player_id"],
            data.get("source"), data.get("position_label"),
        )
        if not result.ok:
            return _failure(result)
        return jsonify({"success": True, **_drop_payload(result)})

    @app.route("/api/teams/<int:team_id>/periods/<period_id>/substitutes", methods=["POST"])
    def add_substitute(team_id, period_id):
        session = app_state.require_session()
        player_id = _body().get("player_id")
        if not player_id:
            return jsonify({"success": False, "error": "player_id is required"}), 400
        result = session.drop_on_substitutes(team_id, period_id, player_id)
        if not result.ok:
            return _failure(result)
        return jsonify({"success": True, **_drop_payload(result)})

    @app.route("/api/teams/<int:team_id>/periods/<period_id>/substitutions", methods=["GET"])
    def get_substitutions(team_id, period_id):
        session = app_state.require_session()
        return jsonify({"success": True, "flags": session.substitution_flags(team_id, period_id)})

    @app.route("/api/teams/<int:team_id>/periods/<period_id>/unassigned", methods=["GET"])
    def get_unassigned(team_id, period_id):
        session = app_state.require_session()
        return jsonify({"success": True, "players": session.unassigned_players(team_id, period_id)})

    # ==================== Periods ==================== #

    @app.route("/api/teams/<int:team_id>/periods", methods=["POST"])
    def add_period(team_id):
        session = app_state.require_session()
        data = _body()
        result = session.add_period(team_id, data.get("half_index"), data.get("duration_minutes", 20))
        if not result.ok:
            return _failure(result)
        return jsonify({"success": True, "period_id": result.value, "periods": session.period_summaries(team_id)})

    @app.route("/api/teams/<int:team_id>/periods/<period_id>", methods=["DELETE"])
    def delete_period(team_id, period_id):
        session = app_state.require_session()
        result = session.delete_period(team_id, period_id)
        if not result.ok:
            return _failure(result)
        return jsonify({"success": True, "periods": session.period_summaries(team_id)})

    @app.route("/api/teams/<int:team_id>/periods/<period_id>/duration", methods=["PUT"])
    def update_duration(team_id, period_id):
        session = app_state.require_session()
        result = session.update_duration(team_id, period_id, _body().get("minutes"))
        if not result.ok:
            return _failure(result)
        return jsonify({"success": True, "duration_minutes": result.value})

    @app.route("/api/teams/<int:team_id>/periods/<period_id>/category", methods=["PUT"])
    def set_category(team_id, period_id):
        session = app_state.require_session()
        result = session.set_performance_category(team_id, period_id, _body().get("performance_category"))
        if not result.ok:
            return _failure(result)
        return jsonify({"success": True, "performance_category": result.value})

    # ==================== Persistence ==================== #

    @app.route("/api/save", methods=["POST"])
    def save_selections():
        session = app_state.require_session()
        if session.is_saving:
            return jsonify({"success": False, "error": "A save is already in progress"}), 409
        result = session.save()
        if not result.ok:
            return jsonify({"success": False, "error": result.message, "save": result.to_dict()}), 502
        return jsonify({"success": True, "save": result.to_dict()})

    @app.route("/api/load", methods=["POST"])
    def load_selections():
        session = app_state.require_session()
        session.load(_body().get("fixture_id"))
        return jsonify({"success": True, "state": _state_payload(session)})

    # ==================== History ==================== #

    @app.route("/api/undo", methods=["POST"])
    def undo_action():
        """Undo the last edit using Command pattern."""
        result = app_state.require_session().undo()
        if not result.ok:
            return _failure(result)
        return jsonify({"success": True, "message": "Action undone"})

    @app.route("/api/redo", methods=["POST"])
    def redo_action():
        """Redo the next edit using Command pattern."""
        result = app_state.require_session().redo()
        if not result.ok:
            return _failure(result)
        return jsonify({"success": True, "message": "Action redone"})

    @app.route("/api/command-history", methods=["GET"])
    def get_command_history():
        session = app_state.require_session()
        return jsonify({
            "success": True,
            "history": session.commands.get_command_history(),
            "can_undo": session.can_undo,
            "can_redo": session.can_redo,
        })

    return app


def run_web_app(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, static_folder: str = ".",
                settings: Optional[StorageSettings] = None) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
        static_folder: Directory containing static files
        settings: Storage settings; read from the environment when omitted
    """
    app = create_app(static_folder, settings or StorageSettings.from_env())
    app.run(host=host, port=port, debug=False)
