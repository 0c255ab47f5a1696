"""Assembly exceptions."""


class AssemblyError(Exception):
    """Raised when assembly cannot proceed without a valid attachment point."""

    pass
