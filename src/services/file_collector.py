"""
File Collector
Reads a rendered build directory into in-memory artifacts
"""

import os
from pathlib import Path
from typing import Iterable, List

from src.models.artifacts import BuildArtifact
from src.utils.logger import get_logger
from src.utils.validators import validate_build_path, ValidationError

logger = get_logger(__name__)


class FileCollectionError(Exception):
    """Raised when a build directory cannot be read completely"""
    pass


def collect_build_artifacts(root: Path) -> List[BuildArtifact]:
    """
    Recursively read every regular file under ``root``.

    Directories are traversed, not emitted. Paths are POSIX-style and
    relative to ``root``; results are sorted by path. Content is not
    inspected, so filtering internal files is left to the caller.

    Args:
        root: Build directory produced by the template renderer

    Returns:
        List of BuildArtifact

    Raises:
        FileCollectionError: If root is missing, not a directory, or any
            file cannot be read (a partial collection is never returned)
    """
    root = Path(root)

    if not root.exists():
        raise FileCollectionError(f"Build directory not found: {root}")
    if not root.is_dir():
        raise FileCollectionError(f"Build path is not a directory: {root}")

    logger.info(f"Collecting build files from: {root}")

    def _raise(error: OSError):
        raise FileCollectionError(f"Cannot read build directory: {error}") from error

    artifacts = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames.sort()
        for filename in filenames:
            local_path = Path(dirpath) / filename
            if not local_path.is_file():
                # sockets, fifos, dangling symlinks
                logger.debug(f"Skipping non-regular file: {local_path}")
                continue

            try:
                relative = validate_build_path(local_path.relative_to(root).as_posix())
                content = local_path.read_bytes()
            except (OSError, ValidationError) as e:
                logger.error(f"❌ Failed to read {local_path}: {str(e)}")
                raise FileCollectionError(f"Failed to read {local_path}: {str(e)}") from e

            artifacts.append(BuildArtifact(relative_path=relative, content=content))

    artifacts.sort(key=lambda artifact: artifact.relative_path)
    logger.info(f"Collected {len(artifacts)} files")
    return artifacts


def exclude_artifacts(artifacts: Iterable[BuildArtifact], excluded: Iterable[str]) -> List[BuildArtifact]:
    """
    Drop local bookkeeping files (e.g. the config schema sidecar) before upload.

    Args:
        artifacts: Collected artifacts
        excluded: Build-relative paths to drop

    Returns:
        Artifacts whose path is not in ``excluded``
    """
    excluded_paths = {validate_build_path(path) for path in excluded}
    kept = []
    for artifact in artifacts:
        if artifact.relative_path in excluded_paths:
            logger.debug(f"Excluding internal file: {artifact.relative_path}")
            continue
        kept.append(artifact)
    return kept
