"""
Storage collaborators for flat selection records.

Every backend implements a full replace: delete the fixture's existing
records, then insert the new ones. The two phases fail with different
exceptions because a failed insert after a successful delete leaves the
fixture with no stored selections.
"""
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

import requests

from .selection_format import SelectionRecord
from ..models.errors import StorageDeleteError, StorageError, StorageInsertError

logger = logging.getLogger(__name__)


class SelectionStorage(ABC):
    """Abstract storage collaborator for a fixture's selection records."""

    @abstractmethod
    def replace_selections(self, fixture_id: str, records: Sequence[SelectionRecord]) -> None:
        """
        Replace every stored record of a fixture.

        Raises:
            StorageDeleteError: If existing records could not be deleted
            StorageInsertError: If the delete succeeded but the insert failed
        """
        pass

    @abstractmethod
    def load_selections(self, fixture_id: str) -> List[dict]:
        """
        Load a fixture's stored rows.

        Raises:
            StorageError: If the rows could not be read
        """
        pass


class InMemorySelectionStorage(SelectionStorage):
    """Keeps rows in a dict; used for offline sessions and tests."""

    def __init__(self):
        self._rows: Dict[str, List[dict]] = {}

    def replace_selections(self, fixture_id: str, records: Sequence[SelectionRecord]) -> None:
        self._rows.pop(fixture_id, None)
        self._rows[fixture_id] = [dict(record.to_dict(), fixture_id=fixture_id) for record in records]

    def load_selections(self, fixture_id: str) -> List[dict]:
        return [dict(row) for row in self._rows.get(fixture_id, [])]


class JsonFileSelectionStorage(SelectionStorage):
    """
    One JSON file per fixture in a data directory.

    The delete phase removes the fixture's file; the insert phase writes a
    new one.
    """

    def __init__(self, data_dir: str = "selections"):
        self.data_dir = data_dir

    def path_for(self, fixture_id: str) -> str:
        safe_id = "".join(c if c.isalnum() or c in "._-" else "_" for c in str(fixture_id))
        return os.path.join(self.data_dir, f"fixture_{safe_id}.json")

    def replace_selections(self, fixture_id: str, records: Sequence[SelectionRecord]) -> None:
        file_path = self.path_for(fixture_id)
        try:
            if os.path.exists(file_path):
                os.remove(file_path)
        except OSError as e:
            raise StorageDeleteError(f"Could not delete existing selections for fixture {fixture_id}: {e}") from e

        try:
            # Ensure directory exists
            if self.data_dir and not os.path.exists(self.data_dir):
                os.makedirs(self.data_dir)
            rows = [dict(record.to_dict(), fixture_id=fixture_id) for record in records]
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump({"fixture_id": fixture_id, "selections": rows}, f, indent=2)
        except OSError as e:
            raise StorageInsertError(f"Could not write selections for fixture {fixture_id}: {e}") from e

    def load_selections(self, fixture_id: str) -> List[dict]:
        file_path = self.path_for(fixture_id)
        if not os.path.exists(file_path):
            return []
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Could not read selections for fixture {fixture_id}: {e}") from e
        if not isinstance(data, dict) or not isinstance(data.get("selections"), list):
            raise StorageError(f"Invalid selections file for fixture {fixture_id}: missing 'selections' list")
        return data["selections"]


class RestSelectionStorage(SelectionStorage):
    """
    Selection table behind a PostgREST style HTTP API.

    DELETE {base}/rest/v1/{table}?fixture_id=eq.<id>, then POST the rows.
    """

    def __init__(self, base_url: str, api_key: Optional[str] = None,
                 table: str = "fixture_team_selections", timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.endpoint = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self.session.headers.update({"apikey": api_key, "Authorization": f"Bearer {api_key}"})

    def replace_selections(self, fixture_id: str, records: Sequence[SelectionRecord]) -> None:
        params = {"fixture_id": f"eq.{fixture_id}"}
        try:
            resp = self.session.delete(self.endpoint, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise StorageDeleteError(f"Delete request failed for fixture {fixture_id}: {e}") from e
        if not resp.ok:
            raise StorageDeleteError(self._describe("Delete", fixture_id, resp))

        if not records:
            return
        rows = [dict(record.to_dict(), fixture_id=fixture_id) for record in records]
        try:
            resp = self.session.post(
                self.endpoint,
                json=rows,
                headers={"Prefer": "return=minimal"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise StorageInsertError(f"Insert request failed for fixture {fixture_id}: {e}") from e
        if not resp.ok:
            raise StorageInsertError(self._describe("Insert", fixture_id, resp))
        logger.debug("Stored %d selection row(s) for fixture %s", len(rows), fixture_id)

    def load_selections(self, fixture_id: str) -> List[dict]:
        try:
            resp = self.session.get(
                self.endpoint,
                params={"fixture_id": f"eq.{fixture_id}", "select": "*"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise StorageError(f"Load request failed for fixture {fixture_id}: {e}") from e
        if not resp.ok:
            raise StorageError(self._describe("Load", fixture_id, resp))
        try:
            rows = resp.json()
        except ValueError as e:
            raise StorageError(f"Load for fixture {fixture_id} returned invalid JSON") from e
        if not isinstance(rows, list):
            raise StorageError(f"Load for fixture {fixture_id} did not return a list")
        return rows

    @staticmethod
    def _describe(phase: str, fixture_id: str, resp: requests.Response) -> str:
        return f"{phase} failed for fixture {fixture_id}: HTTP {resp.status_code} {(resp.text or '')[:500]}"
