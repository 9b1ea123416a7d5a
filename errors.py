"""Error kinds raised by the calculator, the screening flow and the analysis gateway."""


class ScreeningError(Exception):
    """Base class for every error this application raises on purpose."""


class ValidationError(ScreeningError):
    """Malformed or missing request fields. Always surfaced to the caller."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class ConfigurationError(ScreeningError):
    """The upstream credential is not configured."""


class ComputationError(ScreeningError):
    """The return calculator was asked for something outside its domain."""


class UpstreamError(ScreeningError):
    """The generative-language API call did not produce a usable answer."""

    reason = "The AI analysis service returned an error"
    remediation = "Try again later."

    def __init__(self, message: str = None, details: str = None, status_code: int = None):
        super().__init__(message or self.reason)
        self.details = details
        self.status_code = status_code


class UpstreamAuthError(UpstreamError):
    reason = "The AI analysis service rejected the API credential"
    remediation = "Check that GEMINI_API_KEY is set to a valid key."


class UpstreamQuotaError(UpstreamError):
    reason = "The AI analysis service quota or rate limit was exceeded"
    remediation = "Wait a few minutes before screening again, or raise the API quota."


class UpstreamSafetyRejection(UpstreamError):
    reason = "The AI analysis service declined the request on content-safety grounds"
    remediation = "Review the uploaded document and deal description, then retry."


class UpstreamShapeError(UpstreamError):
    reason = "The AI analysis service returned an unexpected response format"
    remediation = "The API response format may have changed; check the configured model."


class UpstreamTransportError(UpstreamError):
    reason = "The AI analysis service could not be reached"
    remediation = "Check network connectivity and retry."
