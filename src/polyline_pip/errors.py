"""Error taxonomy for query handling.

Every error maps to exactly one HTTP status; the message is passed to the
client verbatim. Nothing is retried.
"""


class PipelineError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientInputError(PipelineError):
    """Bad polyline, invalid coordinate, missing or forbidden parameter, bad filter."""

    status_code = 400


class ServiceBusyError(PipelineError):
    """The spatial index is being (re)built."""

    status_code = 503


class DownstreamError(PipelineError):
    """Index query, GeoJSON conversion or serialization failed."""

    status_code = 500
