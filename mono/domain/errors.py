class ConfigError(Exception):
    """Raised at startup when the process configuration cannot be served.

    The service never starts listening when this is raised; it is not a
    per-request error.
    """

    def __init__(self, name: str, value: str, reason: str):
        self.name = name
        self.value = value
        self.reason = reason
        super().__init__(f"error parsing {name}: {value!r}, {reason}")


__all__ = ["ConfigError"]
