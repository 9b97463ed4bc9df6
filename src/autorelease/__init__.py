"""autorelease - conventional-commit release automation.

Classifies commits since the last release, computes the next semantic
version, renders a changelog and writes the new version into project files.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
