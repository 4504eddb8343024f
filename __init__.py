"""
Fishing Spots application.

A FastAPI-powered map where users drop named fishing spots that are shared
with everyone currently viewing the page.
"""
