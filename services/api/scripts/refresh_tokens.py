#!/usr/bin/env python3
"""Token refresh job for cron.

Schedule:
- Run daily (or at least every few weeks) in a cron job. Instagram and
  Facebook long-lived tokens expire after ~60 days; each run pushes that out.

Behavior:
- Instagram: ig_refresh_token on the current long-lived token
- Facebook: fb_exchange_token for a fresh long-lived token
- New tokens are written to Redis (TTL ~60 days); the API reads them from there

Run (local / cron):
  cd services/api
  python -m scripts.refresh_tokens
"""

import asyncio
import os
import sys


# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from social_stats.services.tokens import run_token_refresh  # noqa: E402
from social_stats.stores.redis import close_redis, init_redis  # noqa: E402


async def main() -> int:
    # The token store is Redis; without it there's nowhere to persist renewals.
    await init_redis()

    try:
        results = await run_token_refresh()

        # Final output for cron logs (single JSON-ish blob)
        ok = all(outcome != "failed" for outcome in results.values())
        print({"ok": ok, "tokens": results})
        return 0 if ok else 1
    finally:
        await close_redis()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
