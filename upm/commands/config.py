"""
upm init-config command (--init-config).
"""

from pathlib import Path
from typing import Any

import upkeep.config


def init_config_command(args: Any) -> int:
    """Write a commented settings file with default values."""
    path = Path(args.config)
    upkeep.config.write_default(path)
    print(f"Wrote {path}")
    return 0
