"""
Exceptions raised by the Teamsheet selection engine.

Validation problems caused by user input are reported as typed results
(see results.py). The exceptions here signal caller misuse or storage failure.
"""


class SelectionError(Exception):
    """Base class for selection engine errors."""
    pass


class UnknownTeamError(SelectionError, KeyError):
    """Raised when an operation references a team that does not exist."""

    def __init__(self, team_id):
        self.team_id = team_id
        super().__init__(f"Unknown team id: {team_id!r}")

    def __str__(self) -> str:
        return self.args[0]


class UnknownPeriodError(SelectionError, KeyError):
    """Raised when an operation references a period the team does not have."""

    def __init__(self, team_id, period_id):
        self.team_id = team_id
        self.period_id = period_id
        super().__init__(f"Unknown period {period_id!r} for team {team_id!r}")

    def __str__(self) -> str:
        return self.args[0]


class StorageError(SelectionError):
    """Raised by storage collaborators when a replace or load fails."""
    pass


class StorageDeleteError(StorageError):
    """The delete phase of a replace failed; stored selections are untouched."""
    pass


class StorageInsertError(StorageError):
    """
    The insert phase of a replace failed after the delete phase succeeded.

    The store now holds no selections for the fixture until a retry succeeds.
    """
    pass
