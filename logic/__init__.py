"""
Core logic for the Fishing Spots application.

This package contains the shared spot store, the map widget wrapper and the
configuration and validation helpers used by the server routes.
"""
