"""
Runtime configuration for the Teamsheet selection engine.

Settings are read from environment variables so the same build can run
against a local JSON directory or a hosted REST backend.
"""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

STORAGE_MEMORY = "memory"
STORAGE_FILE = "file"
STORAGE_REST = "rest"
STORAGE_BACKENDS = (STORAGE_MEMORY, STORAGE_FILE, STORAGE_REST)


@dataclass(frozen=True)
class StorageSettings:
    """
    Storage collaborator configuration.

    Attributes:
        backend: One of "memory", "file" or "rest"
        data_dir: Directory used by the JSON file backend
        rest_url: Base URL of the REST backend (e.g. https://xyz.supabase.co)
        rest_key: API key sent as both apikey and bearer token
        rest_timeout: Request timeout in seconds for the REST backend
        table: Table holding the flat selection records
    """
    backend: str = STORAGE_MEMORY
    data_dir: str = "selections"
    rest_url: Optional[str] = None
    rest_key: Optional[str] = None
    rest_timeout: float = 10.0
    table: str = "fixture_team_selections"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StorageSettings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            StorageSettings instance

        Raises:
            ValueError: If the backend is unknown, the REST backend lacks a URL,
                        or the timeout is not a positive number
        """
        env = os.environ if environ is None else environ
        backend = env.get("TEAMSHEET_STORAGE", STORAGE_MEMORY).strip().lower()
        if backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown storage backend '{backend}' (expected one of {', '.join(STORAGE_BACKENDS)})"
            )

        rest_url = env.get("TEAMSHEET_REST_URL") or None
        if backend == STORAGE_REST and not rest_url:
            raise ValueError("TEAMSHEET_REST_URL is required for the rest storage backend")

        try:
            timeout = float(env.get("TEAMSHEET_REST_TIMEOUT", "10"))
        except ValueError:
            raise ValueError("TEAMSHEET_REST_TIMEOUT must be a number of seconds")
        if timeout <= 0:
            raise ValueError("TEAMSHEET_REST_TIMEOUT must be positive")

        return cls(
            backend=backend,
            data_dir=env.get("TEAMSHEET_DATA_DIR", "selections"),
            rest_url=rest_url,
            rest_key=env.get("TEAMSHEET_REST_KEY") or None,
            rest_timeout=timeout,
            table=env.get("TEAMSHEET_REST_TABLE", "fixture_team_selections"),
        )
