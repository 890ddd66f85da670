"""
Publisher Module Entry Point

Allows execution via: python -m apps.publisher

Delegates to the scheduler for all execution modes (scheduled and RUN_ONCE).
"""

import asyncio

from apps.publisher.scheduler import main

if __name__ == "__main__":
    asyncio.run(main())
