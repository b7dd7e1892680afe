# compliance-operator/compliance_operator/version.py
"""
Version management for the compliance operator.

This module holds version information and helpers used by the CLI
and by log lines emitted at startup.
"""

import sys
from typing import Tuple, Dict, Any

__version__ = "0.1.0"

VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0
VERSION_PRE_RELEASE = None  # None, "alpha", "beta", "rc"

PYTHON_MIN_VERSION = (3, 10)


def get_version() -> str:
    """
    Get the full version string.

    Returns:
        Version string in semver format (e.g., "0.1.0", "0.1.0-rc")
    """
    version = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"
    if VERSION_PRE_RELEASE:
        version += f"-{VERSION_PRE_RELEASE}"
    return version


def get_version_info() -> Tuple[int, int, int, str]:
    """Get version information as a (major, minor, patch, pre_release) tuple."""
    return (
        VERSION_MAJOR,
        VERSION_MINOR,
        VERSION_PATCH,
        VERSION_PRE_RELEASE or ""
    )


def check_python_compatibility() -> bool:
    return sys.version_info[:2] >= PYTHON_MIN_VERSION


def get_build_info() -> Dict[str, Any]:
    """
    Get build information for the operator.

    Example:
        from compliance_operator.version import get_build_info
        info = get_build_info()
        print(f"Version: {info['version']}")
    """
    return {
        "version": get_version(),
        "version_info": get_version_info(),
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "python_compatible": check_python_compatibility(),
        "min_python": f"{PYTHON_MIN_VERSION[0]}.{PYTHON_MIN_VERSION[1]}",
    }
