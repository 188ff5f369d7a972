class PluginError(Exception):
    """Base class for every failure raised by the plugin subsystem."""

    kind = "plugin_error"

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.kind}: {self.detail}" if self.detail else self.kind


class PluginNotFound(PluginError):
    """Missing plugin, missing entry script, or undefined guest function."""

    kind = "not_found"


class PluginLoadError(PluginError):
    """Entry script failed to evaluate or did not return a table."""

    kind = "load_error"


class PluginInterpreterError(PluginError):
    """Interpreter bootstrap failed or a located guest function raised."""

    kind = "interpreter_error"


class PluginIOError(PluginError):
    kind = "io_error"


class PluginDisabled(PluginError):
    kind = "disabled"
