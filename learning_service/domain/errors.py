class NotFoundError(LookupError):
    """Referenced row does not exist."""


class ConflictError(ValueError):
    pass


class InvalidCredentials(ValueError):
    pass


class TokenExpired(ValueError):
    pass
