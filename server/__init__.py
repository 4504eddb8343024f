"""
Server modules for the Fishing Spots application.

This package contains the FastAPI router, the per-user map sessions and the
SSE stream delivery.
"""
