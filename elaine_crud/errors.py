class ElaineCrudError(Exception):
    """Base error raised by the CRUD engine."""


class ConfigurationError(ElaineCrudError):
    """A view, field or resource was declared in a way the engine cannot use."""
