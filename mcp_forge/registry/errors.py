"""
Registry errors
"""


class ItemNotFound(LookupError):
    """No component of this kind and identifier exists."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"Registry item not found: kind='{kind}', id='{identifier}'")


class RegistryItemLoadError(Exception):
    """A registry loader failed while producing an item."""

    def __init__(self, kind: str, identifier: str, reason: str | None = None):
        self.kind = kind
        self.identifier = identifier
        message = f"Failed to load registry item: kind='{kind}', id='{identifier}'"
        if reason:
            message += f". {reason}"
        super().__init__(message)


class InvalidCursor(ValueError):
    """A pagination cursor could not be decoded."""

    # JSON-RPC "invalid params"
    code = -32602

    def __init__(self, cursor: str):
        self.cursor = cursor
        super().__init__(f"Invalid cursor: {cursor!r}")
