"""Operating system details."""

import logging
import platform
from functools import lru_cache

from ..models.context import OSInfo

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def os_info() -> OSInfo | None:
    """Describe the running system, or None when nothing could be read."""
    try:
        uname = platform.uname()
    except OSError as e:
        logger.debug(f"couldn't inspect the operating system: {e}")
        return None
    info = OSInfo(
        os=platform.system().lower(),
        arch=platform.machine(),
        kernel=uname.system,
        kernel_version=uname.release,
        hostname=uname.node,
    )
    if not any((info.os, info.arch, info.kernel, info.hostname)):
        return None
    return info
