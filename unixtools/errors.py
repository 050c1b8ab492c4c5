EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_ERROR = 2


class UnixToolsError(Exception):
    pass


class FileAccessError(UnixToolsError):
    """A path that is missing, unreadable or a directory."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class PatternError(UnixToolsError):
    """A search pattern the regular expression engine refused to compile."""

    def __init__(self, pattern: str, message: str):
        super().__init__(message)
        self.pattern = pattern
        self.message = message
