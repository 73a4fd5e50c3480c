"""
Tests for echoes_service: password hashing, JWT issue/validation, the access
gate, the HTTP routes, message history and the completion client.
"""
