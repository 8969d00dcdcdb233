"""
Path helpers shared by the pipelines: output directories, input discovery
and input checks.

Author: Diego Bengochea
"""

from pathlib import Path
from typing import List, Union

from .logging_utils import get_logger

logger = get_logger('paths')


def ensure_directory(path: Union[str, Path]) -> Path:
    """Create ``path`` (and parents) if missing and return it as a Path."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def find_files(directory: Union[str, Path], pattern: str = "*", recursive: bool = True) -> List[Path]:
    """
    Sorted regular files under ``directory`` matching a glob pattern.

    A missing directory yields an empty list and a warning, so callers
    decide whether the absence of inputs is fatal.

    Examples:
        >>> atlas_files = find_files("data/raw/atlas", "*.csv", recursive=False)
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning(f"Input directory does not exist: {directory}")
        return []

    matches = directory.rglob(pattern) if recursive else directory.glob(pattern)
    return sorted(f for f in matches if f.is_file())


def validate_file_exists(path: Union[str, Path], description: str = "") -> Path:
    """
    Check that an input file exists.

    Raises:
        FileNotFoundError: If nothing exists at ``path``
        ValueError: If ``path`` is a directory
    """
    path = Path(path)
    label = f"{description} file" if description else "File"

    if not path.exists():
        raise FileNotFoundError(f"{label} not found: {path}")
    if not path.is_file():
        raise ValueError(f"{label} is not a regular file: {path}")
    return path
