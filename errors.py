"""
Error taxonomy for a prescription run.

Fatal errors (``fatal = True``) abort the whole run and unwind past the
per-patient boundary. Everything else is caught by the pipeline and turned
into a FAILED outcome carrying ``code`` and the message.
"""


class PrescriptionRunError(Exception):
    """Base class for every error raised by this package."""

    code = "UNKNOWN_ERROR"
    fatal = False

    def __init__(self, message, code=None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)


class SourceUnreadable(PrescriptionRunError):
    """A spreadsheet could not be opened or parsed as a table."""

    code = "SOURCE_UNREADABLE"
    fatal = True


class AuthenticationFailed(PrescriptionRunError):
    """The site kept us on the login surface after submitting credentials."""

    code = "AUTHENTICATION_FAILED"
    fatal = True


class GenerationTimeout(PrescriptionRunError):
    code = "GENERATION_TIMEOUT"


class RemoteInteractionError(PrescriptionRunError):
    code = "REMOTE_INTERACTION_ERROR"
