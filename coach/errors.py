"""
Progression Errors

Only configuration and caller-sequencing problems raise. Poor answers are
never errors: they come back as LOW/MEDIUM assessments with hints.
"""


class ProgressionError(Exception):
    """Base class for all progression engine errors."""


class ConfigurationError(ProgressionError, ValueError):
    """Malformed ceilings or settings values."""


class UnknownStepError(ProgressionError, KeyError):
    """A step id that is not part of the curriculum catalog."""

    def __init__(self, step_id: str):
        self.step_id = step_id
        super().__init__(f"Unknown step '{step_id}'")

    def __str__(self) -> str:
        return self.args[0]


class UnknownStageError(ProgressionError, KeyError):
    """A stage id that is not part of the curriculum catalog."""

    def __init__(self, stage_id: str):
        self.stage_id = stage_id
        super().__init__(f"Unknown stage '{stage_id}'")

    def __str__(self) -> str:
        return self.args[0]


class StepLockedError(ProgressionError):
    """
    The step exists but cannot take interactions right now: either its stage
    has not been reached yet, or it is complete and was not reopened.
    """

    def __init__(self, step_id: str, reason: str):
        self.step_id = step_id
        self.reason = reason
        super().__init__(f"Step '{step_id}' is locked: {reason}")


class UnknownSessionError(ProgressionError, KeyError):
    """No engine is registered under this session id."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Unknown session '{session_id}'")

    def __str__(self) -> str:
        return self.args[0]
