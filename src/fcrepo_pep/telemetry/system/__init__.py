"""System (operational) logging."""

from fcrepo_pep.telemetry.system.system_logger import (
    ConsoleFormatter,
    configure_system_logger,
    get_system_logger,
)

__all__ = [
    "ConsoleFormatter",
    "configure_system_logger",
    "get_system_logger",
]
