"""Exceptions raised by passuser operations.

Precondition failures (bad argument types or lengths) use the builtin
``TypeError`` and ``ValueError``. The classes below cover business-rule
failures and misbehaving resolvers. Resolver and hasher exceptions are never
wrapped, so anything not derived from ``PassUserError`` came from a
collaborator.
"""


class PassUserError(Exception):
    """Base class for passuser errors."""


class UserExistsError(PassUserError):
    """An identity already occupies the (realm, username) key."""

    def __init__(self, message: str = "username already exists") -> None:
        super().__init__(message)


class UserNotFoundError(PassUserError):
    """No record matched a lookup that required one.

    Resolvers raise this from ``update_hash`` when nothing matches.
    """

    def __init__(self, message: str = "failed to update password") -> None:
        super().__init__(message)


class IllegalRecordError(PassUserError):
    """A resolver returned a record that can not be trusted.

    Raised when the record carries a reserved or internal key, is not a
    mapping, or belongs to a different identity than the one looked up.
    """

    def __init__(
        self, message: str = "object in user db contains an illegal key", key: str = ""
    ) -> None:
        super().__init__(message)
        self.key = key
