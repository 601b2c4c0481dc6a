"""
Configuration settings for the gradebook app.

These values can be overridden in Django settings by prefixing with GRADEBOOK_.
For example, to change SMS_MAX_LENGTH:
    GRADEBOOK_SMS_MAX_LENGTH = 320

All configuration values are lazily loaded to avoid Django setup issues.
Grade thresholds, the 0-50 score range and the promotion floor are fixed
in code, not here.
"""


def _get_setting(name, default):
    """Get a gradebook setting from Django settings or use default."""
    from django.conf import settings
    return getattr(settings, f'GRADEBOOK_{name}', default)


_DEFAULTS = {
    # Label used when a score references a subject that no longer exists
    'UNKNOWN_SUBJECT_LABEL': 'Unknown Subject',

    # SMS settings
    'SMS_MAX_LENGTH': 160,

    # Celery task settings
    'TASK_MAX_RETRIES': 3,
    'TASK_RETRY_DELAY': 60,  # seconds
}


class _ConfigProxy:
    """
    Lazy configuration proxy that loads settings only when accessed.
    This avoids Django setup issues during module import.
    """

    def __getattr__(self, name):
        if name in _DEFAULTS:
            return _get_setting(name, _DEFAULTS[name])
        raise AttributeError(f"Unknown config setting: {name}")


# Module-level proxy object for attribute access
_config = _ConfigProxy()


def __getattr__(name):
    """Enable module-level attribute access via the config proxy."""
    return getattr(_config, name)
