#!/usr/bin/env python3
"""
ai-pm - entry point when running from a checkout.

Same as the installed `ai-pm` command.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from ai_pm.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
