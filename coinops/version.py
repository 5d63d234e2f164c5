"""Build metadata. Release builds set these through the environment."""

from __future__ import annotations

import os
from typing import Dict


def get_version_info() -> Dict[str, str]:
    return {
        "version": os.getenv("COINOPS_VERSION", "dev"),
        "commit": os.getenv("COINOPS_COMMIT", "unknown"),
        "build_date": os.getenv("COINOPS_BUILD_DATE", "unknown"),
    }
