"""Error kinds raised by the URL registry."""


class RegistryError(Exception):
    """Base class for registry errors."""


class CodeConflictError(RegistryError):
    """Requested short code is already bound to a stored mapping."""

    def __init__(self, short_code: str):
        super().__init__(f"Short code '{short_code}' already exists")
        self.short_code = short_code


class CodeGenerationExhaustedError(RegistryError):
    """Every generated candidate collided with a stored short code."""

    def __init__(self, attempts: int):
        super().__init__(
            f"Unable to generate unique short code after {attempts} attempts"
        )
        self.attempts = attempts


class RegistryInvariantError(RegistryError):
    """Internal consistency violation. Indicates a bug, not bad input."""
