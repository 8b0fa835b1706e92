#!/usr/bin/env python
"""Development server with hot reload support."""

import os

from sessiongate import main

if __name__ in {"__main__", "__mp_main__"}:
    # Mock identity provider unless real Stytch credentials are configured
    os.environ.setdefault("DEV__AUTH_MOCK", "true")
    main()
