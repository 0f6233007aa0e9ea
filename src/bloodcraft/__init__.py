"""
Bloodcraft leveling core.

Player progression engine for the Bloodcraft server plugin: converts kill
events into experience, derives levels from a geometric curve, and publishes
experience/level notifications on the event bus.
"""

__version__ = "1.0.0"

PLUGIN_GUID = "B_Re"
PLUGIN_NAME = "Bloodcraft_Re"
