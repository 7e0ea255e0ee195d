"""
Django signals for shops app.

This module defines signal handlers for:
- Resetting the cached session store when SHOP_SESSION_STORE changes

Usage:
    Signals are automatically connected when app is ready.
    See apps.py for registration.
"""

from __future__ import annotations

import logging

from django.core.signals import setting_changed
from django.dispatch import receiver

from shops.sessions import reset_session_store

logger = logging.getLogger(__name__)


@receiver(setting_changed)
def on_session_store_setting_changed(sender, setting, **kwargs):
    """Rebuild the session store on next use after override_settings."""
    if setting == "SHOP_SESSION_STORE":
        reset_session_store()
        logger.debug("Session store reset", extra={"setting": setting})
