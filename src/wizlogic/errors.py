"""
Error taxonomy for the wizard engine.

    SchemaError      malformed schema, fatal at load time
    ConfigError      caller asked for an unknown mode/field or an invalid value
    StepRenderError  one step failed to render; the others still resolve

ConfigError and StepRenderError are usually *returned* (or handed to a
callback) rather than raised; only SchemaError aborts.
"""

from typing import Any, Optional


class WizardError(Exception):
    """Base class for all wizard engine errors."""
    pass


class SchemaError(WizardError):
    """Raised when a schema is malformed (duplicate id, dangling reference, cycle)."""
    pass


class ConfigError(WizardError):
    """Reported when an update intent names an unknown mode/field or an invalid value."""

    def __init__(self, message: str, mode_id: Optional[str] = None,
                 field_id: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.mode_id = mode_id
        self.field_id = field_id
        self.value = value


class StepRenderError(WizardError):
    """A single step's render failed. Tagged with the step id."""

    def __init__(self, step_id: str, cause: BaseException):
        super().__init__(f"Step '{step_id}' failed to render: {cause}")
        self.step_id = step_id
        self.cause = cause
