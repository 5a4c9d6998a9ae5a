"""
Utility functions for the IPFS client.
"""

import json
import logging
import sys
from typing import Any


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )

    # Reduce noise from third-party libraries unless debugging
    if level.upper() != "DEBUG":
        for name in ("urllib3", "requests"):
            logging.getLogger(name).setLevel(logging.WARNING)


def format_json(value: Any) -> str:
    """Pretty-print a JSON value for terminal output."""
    return json.dumps(value, indent=2, ensure_ascii=False)
