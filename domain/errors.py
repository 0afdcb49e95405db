# zopos/domain/errors.py


class StoreError(Exception):
    """A read against Supabase failed (network, auth or PostgREST error)."""

    def __init__(self, operation: str, cause: object = None):
        self.operation = operation
        self.cause = cause
        message = f"{operation} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
