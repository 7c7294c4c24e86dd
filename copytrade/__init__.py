"""Copy-trade execution and risk-control engine.

Mirrors provider trades onto follower exchange accounts with per-follower
sizing and risk limits.
"""

__version__ = "2.0.0"
