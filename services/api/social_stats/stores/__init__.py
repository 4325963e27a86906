"""Data stores for caching and token persistence.

Stores handle:
- Redis: stats cache, provider token records, TTL policies

No vendor/parsing logic in stores - that belongs in services.
"""
