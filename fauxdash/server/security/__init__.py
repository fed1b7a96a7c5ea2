"""
Authentication, password and rate limiting helpers for the API layer.
"""
