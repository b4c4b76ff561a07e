"""Exception types raised by the studio core"""


class StudioError(Exception):
    """Base class for studio errors"""


class MalformedProjectError(StudioError):
    """Imported project document is not a JSON object"""


class ResourceReleaseFailure(StudioError):
    """A preview handle could not be released"""


class CapabilityDisabledError(StudioError):
    """A bot-gated feature was requested for a bot that lacks the capability"""


class SystemBusyError(StudioError):
    """The chat backend is rate limiting requests"""
