"""User-Agent sent with every outgoing HTTP request."""

from .. import versioning
from .system import os_info


def user_agent(caller: str = "") -> str:
    """Build ``lstn/<short> (<long>; <caller>) <os>/<arch> (<host>) <kernel>/<kver>``."""
    comment = versioning.long()
    if caller:
        comment += f"; {caller}"
    ua = f"lstn/{versioning.short()} ({comment})"
    info = os_info()
    if info is not None:
        system = info.user_agent()
        if system:
            ua += f" {system}"
    return ua
