"""
Save/Load system - explorer state persistence.

Provides:
- Save/load ExplorerState to JSON files
- Numbered save slots (1-5)
- Save integrity validation (checksum)
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import TYPE_CHECKING, Optional
import base64
import hashlib
import json
import logging

from pydantic import BaseModel, ValidationError

from engine.core.events import EventBus
from explorer.world.explorer import ExplorerState

if TYPE_CHECKING:
    from explorer.world.explorer import GridWorldExplorer

logger = logging.getLogger(__name__)


class SaveEvent(Enum):
    """Save system events."""
    SAVE_STARTED = auto()
    SAVE_COMPLETED = auto()
    SAVE_FAILED = auto()
    LOAD_STARTED = auto()
    LOAD_COMPLETED = auto()
    LOAD_FAILED = auto()


class SaveMetadata(BaseModel):
    """Metadata about a save file."""
    slot: int
    timestamp: str
    location: str
    step_count: int = 0


class SaveManager:
    """
    Saves and restores a GridWorldExplorer.

    Usage:
        save_mgr = SaveManager(explorer, save_path="saves")
        save_mgr.save_game(slot=1)
        save_mgr.load_game(slot=1)
    """

    VERSION = "1.0"
    MIN_SLOT = 1
    MAX_SLOT = 5

    def __init__(
        self,
        explorer: Optional[GridWorldExplorer] = None,
        save_path: str = "saves",
        event_bus: Optional[EventBus] = None,
    ):
        self.explorer = explorer
        self.save_path = Path(save_path)
        self.event_bus = event_bus or (explorer.events if explorer else None)
        self._current_slot: Optional[int] = None

    @property
    def current_slot(self) -> Optional[int]:
        return self._current_slot

    def _check_slot(self, slot: int) -> None:
        if not isinstance(slot, int) or not self.MIN_SLOT <= slot <= self.MAX_SLOT:
            raise ValueError(
                f"Invalid save slot: {slot} (expected {self.MIN_SLOT}-{self.MAX_SLOT})"
            )

    def _get_slot_path(self, slot: int) -> Path:
        """Get path for a save slot."""
        return self.save_path / f"save_{slot:02d}.json"

    def _publish(self, event_type: SaveEvent, **data) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)

    def has_save(self, slot: int) -> bool:
        self._check_slot(slot)
        return self._get_slot_path(slot).exists()

    def get_save_slots(self) -> list[Optional[SaveMetadata]]:
        """Metadata for every slot, None where a slot is empty or unreadable."""
        slots: list[Optional[SaveMetadata]] = []
        for slot in range(self.MIN_SLOT, self.MAX_SLOT + 1):
            data = self._read(slot)
            if data is None or 'metadata' not in data:
                slots.append(None)
                continue
            try:
                slots.append(SaveMetadata.model_validate(data['metadata']))
            except ValidationError:
                slots.append(None)
        return slots

    def save_game(self, slot: int) -> bool:
        """
        Save the explorer's current state.

        Args:
            slot: Save slot number (1-5)

        Returns:
            True if save was successful

        Raises:
            ValueError: If slot is out of range
        """
        self._check_slot(slot)
        if self.explorer is None or not self.explorer.is_ready:
            logger.warning("Nothing to save: no level loaded")
            return False

        self._publish(SaveEvent.SAVE_STARTED, slot=slot)
        state = self.explorer.get_state()
        metadata = SaveMetadata(
            slot=slot,
            timestamp=datetime.now().isoformat(timespec='seconds'),
            location=f"{state.current_world}/{state.current_level}",
            step_count=state.step_count,
        )
        save_dict = {
            'version': self.VERSION,
            'metadata': metadata.model_dump(),
            'state': state.model_dump(),
        }
        save_dict['checksum'] = self._calculate_checksum(save_dict)

        try:
            self.save_path.mkdir(parents=True, exist_ok=True)
            with open(self._get_slot_path(slot), 'w', encoding='utf-8') as f:
                json.dump(save_dict, f, indent=2)
        except OSError as e:
            logger.error(f"Save to slot {slot} failed: {e}")
            self._publish(SaveEvent.SAVE_FAILED, slot=slot, error=str(e))
            return False

        self._current_slot = slot
        logger.info(f"Saved game to slot {slot}")
        self._publish(SaveEvent.SAVE_COMPLETED, slot=slot)
        return True

    def load_game(self, slot: int, validate: bool = True) -> bool:
        """
        Restore a saved state into the explorer.

        Args:
            slot: Save slot number (1-5)
            validate: Whether to validate checksum

        Returns:
            True if load was successful
        """
        state = self.read_state(slot, validate=validate)
        if state is None or self.explorer is None:
            return False

        self.explorer.load_state(state)
        self._current_slot = slot
        self._publish(SaveEvent.LOAD_COMPLETED, slot=slot)
        return True

    def read_state(self, slot: int, validate: bool = True) -> Optional[ExplorerState]:
        """Read a slot's ExplorerState without applying it."""
        self._check_slot(slot)
        if not self._get_slot_path(slot).exists():
            return None

        self._publish(SaveEvent.LOAD_STARTED, slot=slot)
        save_dict = self._read(slot)
        if save_dict is None:
            self._publish(SaveEvent.LOAD_FAILED, slot=slot, error="unreadable")
            return None

        if validate:
            checksum = save_dict.get('checksum')
            if checksum and not self._verify_checksum(save_dict, checksum):
                logger.error(f"Save file corrupted: checksum mismatch in slot {slot}")
                self._publish(SaveEvent.LOAD_FAILED, slot=slot, error="checksum_mismatch")
                return None

        try:
            return ExplorerState.model_validate(save_dict.get('state', {}))
        except ValidationError as e:
            logger.error(f"Invalid save data in slot {slot}: {e}")
            self._publish(SaveEvent.LOAD_FAILED, slot=slot, error=str(e))
            return None

    def delete_save(self, slot: int) -> bool:
        """Delete a save slot."""
        self._check_slot(slot)
        path = self._get_slot_path(slot)
        if not path.exists():
            return False
        path.unlink()
        if self._current_slot == slot:
            self._current_slot = None
        return True

    def validate_save(self, slot: int) -> bool:
        """
        Validate a save file's integrity.

        Returns:
            True if save is valid, False if corrupted or missing
        """
        self._check_slot(slot)
        data = self._read(slot)
        if data is None:
            return False
        checksum = data.get('checksum')
        if not checksum:
            return False
        return self._verify_checksum(data, checksum)

    def _read(self, slot: int) -> Optional[dict]:
        path = self._get_slot_path(slot)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error(f"Could not read save slot {slot}: {e}")
            return None
        return data if isinstance(data, dict) else None

    def _calculate_checksum(self, data: dict) -> str:
        """Calculate checksum for save data."""
        json_str = json.dumps(data, sort_keys=True, separators=(',', ':'))
        hash_bytes = hashlib.sha256(json_str.encode('utf-8')).digest()
        return base64.b64encode(hash_bytes).decode('ascii')

    def _verify_checksum(self, data: dict, expected_checksum: str) -> bool:
        """Verify save data checksum."""
        data_copy = data.copy()
        data_copy.pop('checksum', None)
        return self._calculate_checksum(data_copy) == expected_checksum
