"""
Install the operator entry-point into a shared volume.

Instance pods run an init container that copies the operator executable
into an emptyDir volume, so the PostgreSQL container can use it as its
instance manager. Failures here are not recoverable: the init container
must fail and let Kubernetes restart it.
"""

import logging
import shutil
from pathlib import Path

from postgres_operator.constants import BOOTSTRAP_EXECUTABLE_MODE
from postgres_operator.errors import BootstrapError

logger = logging.getLogger(__name__)


def bootstrap_into(executable_path: str | Path, destination: str | Path) -> Path:
    """
    Copy the operator executable to a destination and make it executable.

    Args:
        executable_path: Path of the running operator entry-point
        destination: Target file path inside the shared volume

    Returns:
        The destination path

    Raises:
        BootstrapError: If the copy or the permission change fails
    """
    source = Path(executable_path)
    target = Path(destination)

    try:
        shutil.copyfile(source, target)
    except OSError as e:
        raise BootstrapError(f"Cannot copy {source} to {target}: {e}", cause=e) from e

    try:
        target.chmod(BOOTSTRAP_EXECUTABLE_MODE)
    except OSError as e:
        raise BootstrapError(
            f"Cannot set permissions on {target}: {e}", cause=e
        ) from e

    logger.info(f"Installed operator executable into {target}")
    return target
