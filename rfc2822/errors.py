"""rfc2822 package exception classes."""


class MessageError(Exception):
    """Base class for errors in the rfc2822 package."""


class HeaderParseError(MessageError):
    """A grammar rule did not match at the current position.

    'remaining' is the unparsed text at the point where matching stopped,
    when the raiser knows it.  'position' is filled in by the top level
    entry points, which know the length of the original input.
    """

    def __init__(self, message, remaining=None):
        super().__init__(message)
        self.remaining = remaining
        self.position = None

    def locate(self, text):
        """Set and return the offset into 'text' at which matching stopped."""
        if self.remaining is None:
            self.position = 0
        else:
            self.position = len(text) - len(self.remaining)
        return self.position

    def __str__(self):
        msg = super().__str__()
        if self.position is not None:
            msg = '{} at position {}'.format(msg, self.position)
        return msg


class UnexpectedEndError(HeaderParseError):
    """The input was exhausted before a rule could finish."""


# These are parsing defects which the parser was able to work around.
class MessageDefect(ValueError):
    """Base class for a message defect."""

    def __init__(self, line=None):
        if line is not None:
            super().__init__(line)
        self.line = line


class HeaderDefect(MessageDefect):
    """Base class for a header defect."""

    def __init__(self, *args, **kw):
        super().__init__(*args, **kw)


class InvalidHeaderDefect(HeaderDefect):
    """Header is not valid, message gives details."""


class HeaderMissingRequiredValue(HeaderDefect):
    """A header that must have a value had none"""


class NonPrintableDefect(HeaderDefect):
    """ASCII characters outside the ascii-printable range found"""

    def __init__(self, non_printables):
        super().__init__(non_printables)
        self.non_printables = non_printables

    def __str__(self):
        return ("the following ASCII non-printables found in header: "
            "{}".format(self.non_printables))


class ObsoleteHeaderDefect(HeaderDefect):
    """Header uses syntax declared obsolete by RFC 2822"""


class InvalidDateDefect(HeaderDefect):
    """A date-time matched the grammar but names no real point in time"""
