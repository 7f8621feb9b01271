"""
Configuration for the auth module.

The signing secret comes from the shared settings object; override it with
AUTH_SECRET in any real deployment.
"""

from shortener.config import settings

COOKIE_NAME = "auth"

SECRET: str = settings.AUTH_SECRET
