"""
Persistence service for the Teamsheet selection engine.

Saves go through a storage collaborator as a full replace of the fixture's
flat records. Local drafts of the nested model can also be written to JSON
files and loaded back.
"""
import json
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .selection_format import flatten, reconstruct
from .selection_storage import SelectionStorage
from ..models import SelectionState, Team
from ..models.errors import StorageDeleteError, StorageInsertError

logger = logging.getLogger(__name__)


class SaveStatus(Enum):
    SAVED = "saved"
    DELETE_FAILED = "delete_failed"
    PARTIAL_REPLACE = "partial_replace"


@dataclass(frozen=True)
class SaveResult:
    """
    Outcome of a save.

    Attributes:
        status: What happened to the stored records
        record_count: Records flattened for this save
        message: Human-readable outcome
    """
    status: SaveStatus
    record_count: int = 0
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is SaveStatus.SAVED

    @property
    def retryable(self) -> bool:
        """True when the stored records were deleted but the new ones were not written."""
        return self.status is SaveStatus.PARTIAL_REPLACE

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "record_count": self.record_count,
            "message": self.message,
        }


class SelectionPersistenceService:
    """
    Saves and loads a fixture's selections through a storage collaborator.

    The in-memory state stays authoritative: a failed save never changes it.
    """

    def __init__(self, storage: SelectionStorage):
        self.storage = storage
        self.is_saving = False

    def save(self, state: SelectionState) -> SaveResult:
        """
        Replace the stored records of the state's fixture.

        The state is flattened before the storage is called, so edits made
        after this point are not part of this save.

        Args:
            state: Selection state to save; must carry a fixture id

        Returns:
            SaveResult describing the outcome

        Raises:
            ValueError: If the state has no fixture id
        """
        if not state.fixture_id:
            raise ValueError("Cannot save selections without a fixture id")

        records = flatten(state)
        self.is_saving = True
        try:
            self.storage.replace_selections(state.fixture_id, records)
        except StorageDeleteError as e:
            logger.error("Save of fixture %s failed before anything changed: %s", state.fixture_id, e)
            return SaveResult(SaveStatus.DELETE_FAILED, len(records), str(e))
        except StorageInsertError as e:
            logger.error(
                "Save of fixture %s deleted the stored selections but could not write %d record(s): %s",
                state.fixture_id, len(records), e,
            )
            return SaveResult(
                SaveStatus.PARTIAL_REPLACE,
                len(records),
                f"Stored selections were removed but the new ones were not written; save again. ({e})",
            )
        finally:
            self.is_saving = False

        logger.info("Saved %d selection record(s) for fixture %s", len(records), state.fixture_id)
        return SaveResult(SaveStatus.SAVED, len(records), "Team selections saved")

    def load(self, fixture_id: str, teams: Optional[Dict[int, Team]] = None) -> SelectionState:
        """
        Rebuild a fixture's selection state from storage.

        Args:
            fixture_id: Fixture to load
            teams: Optional team metadata (names, squads, formats) to merge

        Returns:
            Reconstructed SelectionState

        Raises:
            StorageError: If the stored rows could not be read
        """
        rows = self.storage.load_selections(fixture_id)
        state = reconstruct(rows, fixture_id=fixture_id, teams=teams)
        logger.info("Loaded %d selection row(s) for fixture %s", len(rows), fixture_id)
        return state

    # ---------- Local drafts ---------- #

    @staticmethod
    def save_draft_to_file(state: SelectionState, file_path: str) -> None:
        """
        Save the nested selection state to a JSON file.

        Args:
            state: The selection state to save
            file_path: Path where to save the file

        Raises:
            OSError: If the file cannot be written
        """
        # Ensure directory exists
        directory = os.path.dirname(file_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(state.to_json(), f, indent=2)

    @staticmethod
    def load_draft_from_file(file_path: str) -> SelectionState:
        """
        Load a selection state from a JSON draft file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file contains invalid JSON
            ValueError: If JSON structure is invalid
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Draft file not found: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError("Draft file must contain a JSON object")
        return SelectionState.from_json(data)
