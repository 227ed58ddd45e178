class ConfigurationError(ValueError):
    """Channel credentials or provider settings are missing or invalid."""

class StoreWriteError(RuntimeError):
    """The recipient store could not record a delivery outcome."""

    def __init__(self, identity: str, reason: str):
        super().__init__(f"Store write failed for {identity}: {reason}")
        self.identity = identity
        self.reason = reason

class DuplicateRecipientError(ValueError):
    def __init__(self, identity: str):
        super().__init__(f"{identity} is already registered for notifications")
        self.identity = identity

class RecipientNotFoundError(LookupError):
    def __init__(self, identity: str):
        super().__init__(f"{identity} not found")
        self.identity = identity
