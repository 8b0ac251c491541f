class LauncherError(Exception):
    """Base class for errors raised by modlaunch."""


class InvalidPattern(LauncherError, ValueError):
    """A selection rule could not be built from its engine/pattern."""


class DirectoryUnreadableError(LauncherError):
    def __init__(self, directory: str, reason: str = ""):
        self.directory = directory
        self.reason = reason
        msg = f"Mod search directory could not be read: {directory}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)
