"""Exceptions raised by the calculation engine."""


class InvalidArgument(ValueError):
    """An input was rejected before any computation took place.

    Subclasses ``ValueError`` so routers translating ``ValueError`` into
    HTTP 422 handle it without special-casing.
    """
