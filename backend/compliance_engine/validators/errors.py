"""Engine exceptions.

Only orchestration failures propagate to callers. Individual validator faults,
timeouts and cache faults are logged and absorbed by the engine.
"""


class ComplianceEngineError(Exception):
    """Base class for all engine errors."""


class ValidationOrchestrationError(ComplianceEngineError):
    """The execution phase kept failing after every allowed retry."""

    def __init__(self, message: str, retry_count: int, file_path: str = "unknown"):
        super().__init__(message)
        self.retry_count = retry_count
        self.file_path = file_path


class PluginContractError(ComplianceEngineError, ValueError):
    """A plugin is missing a contract member or returned malformed metadata."""

    def __init__(self, plugin_name: str, problems: list[str]):
        super().__init__(
            f"Plugin '{plugin_name}' does not satisfy the plugin contract: "
            f"{'; '.join(problems)}"
        )
        self.plugin_name = plugin_name
        self.problems = problems


class UnsupportedExportFormatError(ComplianceEngineError, ValueError):
    """Requested report format has no exporter."""
