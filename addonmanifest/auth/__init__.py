"""Credential lookup for addonmanifest.

- get_github_token: GitHub API token from an explicit value or the environment
- TokenProvider: The lookup itself, with optional .env loading
"""

from .token import TokenProvider, get_github_token

__all__ = ["TokenProvider", "get_github_token"]
