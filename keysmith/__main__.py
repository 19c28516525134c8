"""Allow running as ``python -m keysmith``."""

from __future__ import annotations

import sys

from keysmith.main import main

sys.exit(main())
