"""
Tutoring management client.

Authenticates a teacher against the tutoring backend, manages student
records, and requests AI-generated feedback per class session.
"""

__version__ = "0.1.0"
