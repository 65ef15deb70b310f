"""Collaborators outside the engine: notifications and widget export."""
