"""
Error taxonomy for the query pipeline.
Each collaborator adapter raises one of these at its boundary so the
pipeline can choose control flow by error kind.
"""


class PipelineError(Exception):
    """Base class for failures raised by pipeline collaborators."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class GenerationError(PipelineError):
    """The SQL generator was unreachable or returned unusable output."""


class ExecutionError(PipelineError):
    """The database rejected the SQL; `message` is the store's diagnostic."""


class ExplanationError(PipelineError):
    """The explainer was unreachable or returned malformed output."""
