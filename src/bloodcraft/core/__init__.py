"""
Core infrastructure layer for Bloodcraft.

Subsystems
----------
- `bloodcraft.core.config`    : static Config + dynamic ConfigManager
- `bloodcraft.core.logging`   : structured logging, log context
- `bloodcraft.core.event`     : EventBus and the process-wide `event_bus`
- `bloodcraft.core.container` : composition root for the leveling services

Nothing is re-exported here; import from the subsystem packages so that
importing one subsystem never initializes another.
"""
