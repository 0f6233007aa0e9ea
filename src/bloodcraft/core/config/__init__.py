"""
Configuration subsystem for Bloodcraft.

Static vs Dynamic Configuration
--------------------------------
**Static (Config):**
- Loaded from environment variables (.env support) at import
- Includes: environment, log level/format, logs and config directories

**Dynamic (ConfigManager, `bloodcraft.core.config.manager`):**
- Built-in infrastructure defaults deep-merged with YAML from CONFIG_DIR
- Includes: `leveling.*` balance values, `core.*` store/event knobs
- Validated runtime writes that publish `config.updated`

The manager is not re-exported here: it depends on the logging subsystem,
which itself reads the static `Config`.

Usage Examples
--------------
```python
from bloodcraft.core.config import Config
from bloodcraft.core.config.manager import config_manager

if Config.is_production():
    ...

await config_manager.initialize()
growth = config_manager.get("leveling.growth_factor", 1.1)
await config_manager.set("leveling.growth_factor", 1.15, modified_by="admin")
```
"""

from bloodcraft.core.config.config import Config, Environment
from bloodcraft.core.config.errors import (
    ConfigError,
    ConfigInitializationError,
    ConfigValidationError,
    ConfigWriteError,
)
from bloodcraft.core.config.validator import (
    ConfigSchema,
    SchemaField,
    get_schema_for_top_key,
    register_schema,
    unregister_schema,
    validate_config_value,
)

__all__ = [
    "Config",
    "Environment",
    "ConfigError",
    "ConfigInitializationError",
    "ConfigValidationError",
    "ConfigWriteError",
    "ConfigSchema",
    "SchemaField",
    "get_schema_for_top_key",
    "register_schema",
    "unregister_schema",
    "validate_config_value",
]
