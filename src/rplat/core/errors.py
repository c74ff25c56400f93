from __future__ import annotations


class RouterError(Exception):
    """Base class for errors raised by the router platform layer."""


class NotSupportedError(RouterError):
    def __init__(self, platform: str = "") -> None:
        super().__init__("unsupported platform")
        self.platform = platform


class PlatformPreconditionError(RouterError):
    """A platform-specific requirement for running the agent is not met."""


class Jffs2NotEnabledError(PlatformPreconditionError):
    def __init__(self) -> None:
        super().__init__(
            "could not install service without jffs, follow this guide to enable: "
            "https://wiki.dd-wrt.com/wiki/index.php/Journalling_Flash_File_System"
        )


class WatcherInitError(RouterError):
    pass


class HandlerError(RouterError):
    """A per-platform hook failed; the original exception is ``__cause__``."""

    def __init__(self, platform: str, hook: str, cause: BaseException) -> None:
        super().__init__(f"{platform}: {hook}: {cause}")
        self.platform = platform
        self.hook = hook


class ReadinessCancelledError(RouterError):
    pass


class ClientInfoParseError(RouterError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
