"""
Leveling module for Bloodcraft.

Public surface:

- `curve`: level <-> experience conversions
- `formulas`: kill reward math
- `LevelingSettings`: frozen snapshot of `leveling.*` configuration
- `PlayerRecordStore`: per-player progression state
- `ExperienceEventProcessor`: kill/award entry points
- `LevelingLogListeners`: default progression log listeners
"""

from . import curve, formulas
from .events import ALL_LEVELING_EVENTS, EXPERIENCE_GAINED, LEVEL_CHANGED
from .listeners import LevelingLogListeners
from .processor import ExperienceEventProcessor
from .settings import DEFAULT_SETTINGS, LevelingSettings, register_leveling_validators
from .store import PlayerRecordStore

__all__ = [
    "curve",
    "formulas",
    "ALL_LEVELING_EVENTS",
    "EXPERIENCE_GAINED",
    "LEVEL_CHANGED",
    "DEFAULT_SETTINGS",
    "LevelingSettings",
    "register_leveling_validators",
    "PlayerRecordStore",
    "ExperienceEventProcessor",
    "LevelingLogListeners",
]
