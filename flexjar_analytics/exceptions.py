"""Project-wide custom exception types."""


class InvalidPayloadError(ValueError):
    """Raised when a submission or theme payload cannot be turned into a model."""

    def __init__(self, message: str) -> None:  # noqa: D401 – simple constructor
        super().__init__(message)


class UnknownReportError(LookupError):
    """Raised when a report name has no registered aggregator."""

    def __init__(self, report: str) -> None:
        super().__init__(f"Unknown report: {report!r}")
        self.report = report
