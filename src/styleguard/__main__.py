"""Allow ``python -m styleguard``."""

from __future__ import annotations

import sys

from styleguard.cli import main

sys.exit(main())
