"""
Configuration subsystem for retroemit.

Static configuration is read from ``RETROEMIT_``-prefixed environment
variables (with ``.env`` support through python-dotenv) when this package
is first imported.

```python
from retroemit.core.config import Config

if Config.EVENT_TYPE_SUGGESTIONS:
    ...

Config.load()  # re-read the environment
```
"""

from retroemit.core.config.config import Config, Environment

__all__ = [
    "Config",
    "Environment",
]
