"""Domain model, sync planning, policy checks and share service for peer-to-peer LAN file sync."""

__version__ = "0.1.0"