"""
Wildcard file name matching.

Only leading and trailing `*` act as wildcards. Any `*` elsewhere in the
pattern is removed before comparing, so `a*b` matches exactly `ab`.
"""

WILDCARD = '*'


def matches_pattern(name: str, pattern: str) -> bool:
    """
    Check whether a file name satisfies a wildcard pattern.

    Both arguments are compared as given; callers lowercase them first for
    case-insensitive matching.

    Args:
        name: File name to test
        pattern: Search term, optionally starting and/or ending with `*`

    Returns:
        True if the name matches the pattern
    """
    stripped = pattern.replace(WILDCARD, '')

    if pattern.startswith(WILDCARD):
        if pattern.endswith(WILDCARD):
            return stripped in name
        return name.endswith(stripped)

    if pattern.endswith(WILDCARD):
        return name.startswith(stripped)

    return name == stripped
