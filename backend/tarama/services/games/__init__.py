"""Game domain services: board, enclosure rules, rooms and room lifecycle.

This package contains the authoritative game logic imported by the socket
handlers, keeping transport concerns separated from core game mechanics.
"""
