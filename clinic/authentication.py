"""
Token authentication for the front-desk client.

Kept in its own module so ``REST_FRAMEWORK`` can reference it by import
path without pulling in any views.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """``Authorization: Token <key>`` as issued by the login endpoint."""

    keyword = 'Token'
