"""Async logging, iptables/ipset control, caching and utility helpers for network-hiding services."""

__version__ = "0.6.0"