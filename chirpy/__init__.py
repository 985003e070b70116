"""Chirpy - a small chirp-posting HTTP API.

Core concepts:
- Users register with an email + password; only a password hash is stored.
- Login issues a short-lived JWT; authenticated requests send it as
  `Authorization: Bearer <token>`.
- Chirps are short (140 chars max) posts owned by a user.

See README for setup and usage.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
