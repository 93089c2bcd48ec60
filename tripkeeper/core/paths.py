"""
Path utility module
Locates the data directory used for the store file and logs
"""

from pathlib import Path
from typing import Optional

from tripkeeper.core.logger import get_logger

logger = get_logger(__name__)


def ensure_dir(dir_path: Path) -> Path:
    """
    Ensure directory exists, create if it doesn't

    Args:
        dir_path: Directory path

    Returns:
        Directory path
    """
    dir_path = Path(dir_path)
    if not dir_path.exists():
        dir_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created directory: {dir_path}")
    return dir_path


def get_data_dir(subdir: Optional[str] = None) -> Path:
    """
    Get data directory (~/.config/tripkeeper)

    Args:
        subdir: Optional subdirectory name

    Returns:
        Data directory path
    """
    data_dir = Path.home() / ".config" / "tripkeeper"

    if subdir:
        data_dir = data_dir / subdir

    return ensure_dir(data_dir)


def get_db_path(db_name: str = "tripkeeper.db") -> Path:
    """
    Get store file path

    Args:
        db_name: Store file name

    Returns:
        Store file path
    """
    return get_data_dir() / db_name
