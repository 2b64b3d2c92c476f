"""Offline swap quoting for stable-swap pools and order-book markets."""

__version__ = "0.1.0"

__all__ = ["openorders", "orderbook", "pools", "serialize", "serum_fees", "stable", "utils"]