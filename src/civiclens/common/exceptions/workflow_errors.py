# File: common/exceptions/workflow_errors.py
class WorkflowError(Exception):
    """Base class for errors raised inside the submission workflow."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class FingerprintExtractionError(WorkflowError):
    """The model call failed or returned a payload that does not validate."""


class LLMUnavailableError(WorkflowError):
    """Every configured model failed to answer."""


class InvalidStateTransition(WorkflowError):
    """A draft was asked to move along an edge its current state does not have."""

    def __init__(self, current: str, action: str):
        self.current = current
        self.action = action
        super().__init__(f"Cannot {action} a submission in state '{current}'")
