"""Exception classes for the spanlog package."""


class ConfigurationError(Exception):
    """Raised when exporter configuration is invalid.

    This exception is only raised while loading configuration or building
    an exporter from it. In permissive mode, validation problems are logged
    as warnings and defaults are used instead.
    """


class ShutdownTimeoutError(TimeoutError):
    """Raised when shutdown() is called with an already expired deadline.

    The exporter is stopped regardless; only the reported outcome differs.
    """
