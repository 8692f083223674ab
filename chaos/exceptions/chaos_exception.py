class ChaosException(Exception):
    """Base class for all exceptions raised by the Chaos library."""

    def __init__(self, message: str, context: str = ""):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self):
        return f"ChaosException: {self.message}"
