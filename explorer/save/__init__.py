"""
Save module - explorer state persistence.

Provides:
- Save/load explorer state in numbered slots
- Checksum validation
"""

from explorer.save.manager import SaveManager, SaveMetadata, SaveEvent

__all__ = [
    "SaveManager",
    "SaveMetadata",
    "SaveEvent",
]
