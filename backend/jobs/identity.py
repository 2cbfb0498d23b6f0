"""Process and host identity used to build global job ids."""

import logging
import os
import socket
import zlib
from typing import Optional

from config import settings

logger = logging.getLogger(__name__)


def get_process_id() -> str:
    """Return the id of the current process as a string."""
    return str(os.getpid())


def get_host_address(override: Optional[str] = None) -> str:
    """Return the address of this host.

    Uses the HOST_ADDRESS setting when configured, otherwise the address
    the local host name resolves to. Falls back to "unknown" when the
    host name cannot be resolved.
    """
    configured = override or settings.host_address
    if configured:
        return configured
    try:
        return socket.gethostbyname(socket.gethostname())
    except OSError as e:
        logger.debug(f"Could not resolve host address: {e}")
        return "unknown"


def full_name_hash(full_name: str) -> int:
    """Deterministic hash of a job full name.

    The built-in hash() is salted per interpreter, which would break
    correlation by a collector polling several processes.
    """
    return zlib.crc32(full_name.encode("utf-8"))


def build_global_job_id(full_name: str, process_id: str, host_address: str) -> str:
    """Build the id correlating one job across polls of the same process."""
    return f"{process_id}_{host_address}_{full_name_hash(full_name)}"
