"""Custom exceptions for keyvify."""


class KeyvifyError(Exception):
    """Base exception for keyvify errors."""

    code = "KEYVIFY_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        """Initialize error.

        Args:
            message: Error message
            code: Stable error code (defaults to the class code)
        """
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(f"[{self.code}] {message}")


class NoKeyError(KeyvifyError):
    """Raised when an empty key is passed."""

    code = "NO_KEY"

    def __init__(self, message: str = "No key was provided") -> None:
        super().__init__(message)


class InvalidKeyError(KeyvifyError):
    """Raised when a key or path has the wrong type or shape."""

    code = "INVALID_KEY"

    def __init__(self, message: str = "Invalid key") -> None:
        super().__init__(message)


class NoValueError(KeyvifyError):
    """Raised when a write is attempted without a value."""

    code = "NO_VALUE"

    def __init__(self, message: str = "No value was provided") -> None:
        super().__init__(message)


class ValueNotObjectError(KeyvifyError):
    """Raised when a dot-notation path is used against a non-object value."""

    code = "VALUE_NOT_OBJECT"

    def __init__(self, message: str = "Value is not an object", segment: str | None = None) -> None:
        """Initialize error.

        Args:
            message: Error message
            segment: Path segment holding the non-object value, if known
        """
        self.segment = segment
        if segment is not None:
            message = f"{message} (at '{segment}')"
        super().__init__(message)


class InvalidParametersError(KeyvifyError):
    """Raised when a key parameter is neither a key nor a (key, path) pair."""

    code = "INVALID_PARAMETERS"

    def __init__(self, message: str = "Expected a key or a (key, path) pair") -> None:
        super().__init__(message)


class NoStoreNameError(KeyvifyError):
    """Raised when a store is constructed without a name."""

    code = "NO_DB_NAME"

    def __init__(self, message: str = "No store name was provided") -> None:
        super().__init__(message)


class InvalidStoreNameError(KeyvifyError):
    """Raised when the store name cannot be used as a table or collection name."""

    code = "INVALID_DB_NAME"

    def __init__(self, name: object) -> None:
        self.name = name
        super().__init__(f"Invalid store name: {name!r}")


class InvalidDialectError(KeyvifyError):
    """Raised when the configured dialect is not supported."""

    code = "INVALID_DIALECT"

    def __init__(self, dialect: object) -> None:
        self.dialect = dialect
        super().__init__(f"Unsupported dialect: {dialect!r}")


class NoStorageError(KeyvifyError):
    """Raised when a file-backed dialect is configured without a storage path."""

    code = "NO_SQLITE_STORAGE"

    def __init__(self, message: str = "No storage path was provided") -> None:
        super().__init__(message)


class InvalidConfigError(KeyvifyError):
    """Raised when store configuration fails validation."""

    code = "INVALID_CONFIG"


class SerializationError(KeyvifyError):
    """Raised when a value cannot be serialized or deserialized."""

    code = "SERIALIZATION_ERROR"
