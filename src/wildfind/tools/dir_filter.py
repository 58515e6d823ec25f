"""
Directory descent rules for wildfind.

Decides whether the walker should enter a subdirectory, given the run's
ignore and allow rules and whether the subdirectory sits directly in the
initial search directory.
"""

import logging

from ..models.config import SearchConfig


logger = logging.getLogger(__name__)


def should_descend(dir_name: str, config: SearchConfig, at_root: bool) -> bool:
    """
    Check if the walker should descend into a subdirectory.

    A root-only rule is inert below the initial directory; the other rule
    (or the default pass-through) still decides there. An empty allow rule
    permits everything that is not ignored.

    Args:
        dir_name: Name of the candidate subdirectory
        config: Search configuration holding the ignore and allow rules
        at_root: True when the subdirectory is an entry of the initial directory

    Returns:
        True if the subdirectory should be walked
    """
    lower = dir_name.lower()

    ignore = config.ignore
    if not (ignore.root_only and not at_root):
        if lower in ignore.names:
            logger.debug(f"Ignoring directory: {dir_name}")
            return False

    allow = config.allow
    if allow.root_only and not at_root:
        return True

    if allow.names and lower not in allow.names:
        logger.debug(f"Directory not in allow list: {dir_name}")
        return False

    return True
