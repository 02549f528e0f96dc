import pulumi


class ConfigurationError(pulumi.RunError, ValueError):
    """Raised when the component input cannot be resolved.

    ``field`` is the dotted path of the offending input, e.g.
    ``network_config.connectivity``.
    """

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"invalid value for '{field}': {message}")
