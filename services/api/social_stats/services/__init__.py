"""Business logic services.

Vendor clients, token renewal and the stats cache live here.
"""
