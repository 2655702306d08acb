"""Custom exceptions for identity matching, indexing and provider calls."""


class DimensionMismatchError(ValueError):
    """Raised when two embeddings of different lengths are compared or stored."""

    def __init__(self, left: int, right: int):
        self.left = left
        self.right = right
        self.message = f"Embedding dimension mismatch: {left} != {right}"
        super().__init__(self.message)


class ProviderError(Exception):
    """An external AI provider call failed (quota, auth, network, bad response)."""

    def __init__(self, operation: str, message: str | None = None):
        self.operation = operation
        self.message = (
            f"{operation} failed: {message}" if message else f"{operation} failed"
        )
        super().__init__(self.message)


class IdentityNotFoundError(LookupError):
    """Raised when an identity id does not resolve to a stored record."""

    def __init__(self, identity_id: str):
        self.identity_id = identity_id
        super().__init__(f"Identity {identity_id} not found")
