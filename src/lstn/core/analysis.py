"""Analysis context attached to the requests of one invocation."""

import logging
import uuid
from pathlib import Path

from .. import versioning
from ..models.context import AnalysisContext, VersionInfo
from ..services.git import git_context
from ..services.system import os_info

logger = logging.getLogger(__name__)


def new_context(directory: Path | None = None, npm_version: str | None = None) -> AnalysisContext:
    """Build the context: tool version always, OS and git when they can be read."""
    directory = directory or Path.cwd()
    package_managers = {"npm": npm_version} if npm_version else None
    context = AnalysisContext(
        id=str(uuid.uuid4()),
        version=VersionInfo(short=versioning.short(), long=versioning.long()),
        os=os_info(),
        git=git_context(directory),
        packagemanagers=package_managers,
    )
    logger.debug(f"analysis context {context.id} for {directory}")
    return context
