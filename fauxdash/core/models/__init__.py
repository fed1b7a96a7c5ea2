"""
Pydantic models shared across the server.
"""
