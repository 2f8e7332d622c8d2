"""Miscellaneous utilities, and the top level parse entry points.

Each parse_XXX function applies one grammar rule to the whole of its
argument.  Text left over after the rule matched is an error, and any
HeaderParseError raised carries the offset into the input at which
matching stopped in its 'position' attribute.  Under a policy with
raise_on_defect set, the first defect recorded in the parse tree is raised
once the whole value has matched.

"""

__all__ = [
    'format_datetime',
    'parse_value',
    'parse_date_time',
    'parse_address_list',
    'parse_mailbox',
    'parse_quoted_string',
    'parse_comment',
    'parse_message_id',
    'parse_unstructured',
    'quote_string',
    ]

import datetime

from rfc2822 import errors
from rfc2822 import _policybase
from rfc2822 import _header_value_parser as parser

quote_string = parser.quote_string

_DAY_NAMES = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
_MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
                'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']


def format_datetime(dt, usegmt=False):
    """Turn a datetime into a date string as specified in RFC 2822.

    If usegmt is True, dt must be an aware datetime with an offset of zero.  In
    this case 'GMT' will be rendered instead of the normal +0000 required by
    RFC2822.  A naive datetime is rendered with the zone -0000, meaning the
    offset is unknown.
    """
    if dt.tzinfo is None:
        if usegmt:
            raise ValueError("usegmt option requires a UTC datetime")
        zone = '-0000'
    else:
        offset = dt.utcoffset()
        if usegmt:
            if offset != datetime.timedelta(0):
                raise ValueError("usegmt option requires a UTC datetime")
            zone = 'GMT'
        else:
            sign = '-' if offset < datetime.timedelta(0) else '+'
            minutes = abs(offset) // datetime.timedelta(minutes=1)
            zone = '{}{:02d}{:02d}'.format(sign, *divmod(minutes, 60))
    return '{}, {:02d} {} {:04d} {:02d}:{:02d}:{:02d} {}'.format(
        _DAY_NAMES[dt.weekday()], dt.day, _MONTH_NAMES[dt.month - 1],
        dt.year, dt.hour, dt.minute, dt.second, zone)


def parse_value(rule, value, policy=None):
    """Apply the parser function 'rule' to all of 'value'.

    Returns the token produced by the rule.  Raises HeaderParseError, with
    its position set, if the rule fails or does not consume all of value.
    If policy.raise_on_defect is set the first defect found in the tree is
    raised.
    """
    if policy is None:
        policy = _policybase.default
    try:
        token, rest = rule(value, policy)
        if rest:
            raise errors.HeaderParseError(
                "unexpected text '{}' after {}".format(
                    rest, token.token_type), rest)
    except errors.HeaderParseError as err:
        err.locate(value)
        raise
    _check_defects(token, policy)
    return token

def _check_defects(token, policy):
    if policy.raise_on_defect and token.all_defects:
        raise token.all_defects[0]


def parse_date_time(value, policy=None):
    return parse_value(parser.get_date_time, value, policy)

def parse_address_list(value, policy=None):
    return parse_value(parser.get_address_list, value, policy)

def parse_mailbox(value, policy=None):
    return parse_value(parser.get_mailbox, value, policy)

def parse_message_id(value, policy=None):
    return parse_value(parser.get_msg_id, value, policy)

def parse_quoted_string(value, policy=None):
    """Return the content of the quoted-string 'value', unescaped."""
    return parse_value(parser.get_quoted_string, value, policy).content

def parse_comment(value, policy=None):
    """Check that 'value' is a single comment.

    Comments carry no meaning, so there is nothing to return; a malformed
    comment raises HeaderParseError.
    """
    parse_value(parser.get_comment, value, policy)

def parse_unstructured(value, policy=None):
    """Return 'value' with its folds removed."""
    if policy is None:
        policy = _policybase.default
    unstructured = parser.get_unstructured(value, policy)
    _check_defects(unstructured, policy)
    return str(unstructured)
