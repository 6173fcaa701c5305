class ConfigurationError(ValueError):
    """Raised when a star buffer is configured with invalid parameters.

    Only ever raised while configuring or creating a buffer, never while
    stars are being offered.
    """
