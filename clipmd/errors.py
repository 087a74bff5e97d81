"""Exceptions raised by the archiver's collaborators."""


class ClipmdError(Exception):
    """Base class for archiver failures reported to the user."""


class InvalidURLError(ClipmdError):
    """The URL does not point at an X article or status page."""


class ScrapeError(ClipmdError):
    """The browser could not load or read the article page."""


class OutputError(ClipmdError):
    """The article bundle could not be written to disk."""
