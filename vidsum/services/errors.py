"""Exceptions raised by the processing service."""


class SubmissionError(Exception):
    """The submitted video descriptor is structurally invalid."""

    def __init__(self, message: str, too_large: bool = False):
        super().__init__(message)
        self.too_large = too_large


class StageFailure(Exception):
    """A pipeline stage could not produce its output."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage}: {message}")
        self.stage = stage
