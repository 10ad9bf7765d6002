"""Machine checks for the organisation's Python style guide.

``styleguard`` validates the pre-commit hook configuration (semantic-version
pins, required hooks, line-length agreement), keeps the style guide document
consistent with that configuration, and checks a local checkout follows the
documented workflow.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
