"""
Form validation utilities.
"""
from typing import List, Optional
from urllib.parse import urlsplit


def validate_navigation_target(target: Optional[str]) -> List[str]:
    """
    Validate the page a guarded navigation should lead to.

    Only local absolute paths are accepted so a confirmed navigation can never
    redirect off-site.

    Args:
        target: Requested destination, e.g. '/services/12'

    Returns:
        List of error messages (empty if valid)
    """
    errors = []

    if not target or not target.strip():
        errors.append('Navigation target is required.')
        return errors

    target = target.strip()
    parts = urlsplit(target)
    if parts.scheme or parts.netloc:
        errors.append('Navigation target must be a path within this site.')
    elif not target.startswith('/') or target.startswith('//') or '\\' in target:
        errors.append('Navigation target must be an absolute path (e.g., /services).')

    return errors
