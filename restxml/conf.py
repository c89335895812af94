"""Library settings.

These are read from the Django settings when those are available,
otherwise the defaults below apply. This keeps the library usable in
scripts that don't configure Django at all.
"""

import os

from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver

from restxml import __version__

_originals = {}


def _get_setting(name, default):
    if not settings.configured and not os.environ.get("DJANGO_SETTINGS_MODULE"):
        return default
    return getattr(settings, name, default)


# -- transport

# The timeout (in seconds) of the default HTTP transport.
RESTXML_TIMEOUT = _get_setting("RESTXML_TIMEOUT", 30)

# The User-Agent header that the default HTTP transport sends.
RESTXML_USER_AGENT = _get_setting("RESTXML_USER_AGENT", f"restxml/{__version__}")

# -- response parsing

# Whether element text is stripped from surrounding whitespace before it's converted.
# Pretty-printed XML often has newlines around the text of an element.
RESTXML_STRIP_TEXT = _get_setting("RESTXML_STRIP_TEXT", True)


@receiver(setting_changed)
def _on_settings_change(setting, value, enter, **kwargs):
    if not setting.startswith("RESTXML_"):
        return

    conf_module = globals()
    if value is None and not enter:
        # override_settings().disable() returns what the django settings module had.
        # Revert to our defaults here instead.
        value = _originals.get(setting)
    else:
        # Track defaults of this file for reverting to them
        _originals.setdefault(setting, conf_module[setting])

    conf_module[setting] = value
