"""Inventory editor: product listing, editing and the edit-session state machine."""

__version__ = "0.1.0"
