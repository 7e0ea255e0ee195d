"""
System checks for the Fygaro settings.

Run with every management command that performs checks (runserver,
migrate, check). A missing button URL would otherwise turn /pay into a
relative "?jwt=..." redirect.
"""

from __future__ import annotations

from urllib.parse import urlparse

from django.conf import settings
from django.core import checks


def is_absolute_http_url(url: str) -> bool:
    parsed = urlparse(url or "")
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@checks.register(checks.Tags.compatibility)
def check_fygaro_settings(app_configs=None, **kwargs) -> list[checks.CheckMessage]:
    errors: list[checks.CheckMessage] = []

    if not is_absolute_http_url(getattr(settings, "FYGARO_BUTTON_URL", "")):
        errors.append(
            checks.Error(
                "FYGARO_BUTTON_URL must be an absolute http(s) URL.",
                hint="Set FYGARO_BUTTON_URL to the hosted payment button address.",
                id="payments.E001",
            )
        )

    for name in ("FYGARO_API_KEY", "FYGARO_SECRET"):
        if not getattr(settings, name, ""):
            errors.append(
                checks.Error(
                    f"{name} is not set.",
                    hint="Payment requests cannot be signed without it.",
                    id="payments.E002",
                )
            )

    return errors
