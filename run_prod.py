#!/usr/bin/env python
"""Production server — no hot reload."""

import os

os.environ["DEV__RELOAD"] = "false"

from sessiongate import main

if __name__ in {"__main__", "__mp_main__"}:
    main()
