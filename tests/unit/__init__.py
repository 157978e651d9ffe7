"""
Unit Tests
==========

One module per actionsearch module. Catalogs are built in memory or taken
from the bundled sample data; nothing touches the network.

Run with: python -m pytest tests/unit/ -v
"""
