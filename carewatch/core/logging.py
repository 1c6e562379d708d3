"""
Logging helpers.

Patient identifiers are PHI-adjacent, so they are masked before they reach
log output. Everything else goes through the standard module loggers.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once for the process"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    # Keep SQL echo out of clinical logs
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)


def mask_identifier(value: Optional[str], visible: int = 6) -> str:
    """
    Truncate an identifier for log output.

    Args:
        value: Patient or alert identifier
        visible: Number of leading characters to keep

    Returns:
        Masked identifier, e.g. "3f2a9c***"
    """
    if not value:
        return "[none]"
    value = str(value)
    if len(value) <= visible:
        return value[:1] + "***"
    return f"{value[:visible]}***"
