"""Parsers for the core rules of RFC 2234, "Augmented BNF for Syntax
Specifications: ABNF".

Every rule in this module is a callable that accepts the unparsed text and
returns a tuple (result, remaining), where remaining is the text left after
the rule consumed what it matched.  A rule that does not match raises
HeaderParseError (UnexpectedEndError if it ran out of input).  Since the
input is an immutable string, a caller that catches the error still holds
the value it passed in, and so backtracking to try another alternative is
just a matter of passing that value to the next rule.

The single character rules return the character they matched.  The
repetition combinators return a list of whatever their sub-rule returns.
The composite rules (crlf, lwsp, quoted_pair, quoted_string) return the
exact text they consumed.

The terminal called 'char' in the RFC is called 'character' here.

This module is the shared toolkit for the RFC 2822 header parser and for
other grammars (such as the RFC 2821 SMTP commands) built from the same
primitives.

"""

from rfc2822 import errors


def _expected(label, value):
    if not value:
        return errors.UnexpectedEndError(
            "expected {} but found end of input".format(label), value)
    return errors.HeaderParseError(
        "expected {} but found '{}'".format(label, value), value)


#
# Character classes
#

class CharClass:

    """A named single character predicate usable as a rule.

    Calling the instance on a value matches the first character of the
    value against the predicate.  'label' is used in error messages.
    """

    def __init__(self, label, predicate):
        self.label = label
        self.predicate = predicate

    def __repr__(self):
        return '{}({!r})'.format(self.__class__.__name__, self.label)

    def __contains__(self, char):
        return self.predicate(char)

    def __call__(self, value):
        if not value or not self.predicate(value[0]):
            raise _expected(self.label, value)
        return value[0], value[1:]


def _in_range(low, high):
    return lambda c: low <= ord(c) <= high

def _one_of(chars):
    return lambda c: c in chars

alpha = CharClass('alphabetic character',
                  lambda c: 'A' <= c <= 'Z' or 'a' <= c <= 'z')
bit = CharClass("bit ('0' or '1')", _one_of('01'))
character = CharClass('7-bit character excluding NUL', _in_range(1, 127))
cr = CharClass('carriage return', _one_of('\r'))
lf = CharClass('linefeed', _one_of('\n'))
ctl = CharClass('control character',
                lambda c: ord(c) <= 31 or ord(c) == 127)
digit = CharClass('digit', _in_range(48, 57))
dquote = CharClass('double quote', _one_of('"'))
hexdig = CharClass('hexadecimal digit', _one_of('0123456789ABCDEFabcdef'))
htab = CharClass('horizontal tab', _one_of('\t'))
octet = CharClass('any 8-bit character', lambda c: True)
sp = CharClass('space', _one_of(' '))
vchar = CharClass('printable character', _in_range(33, 126))
wsp = CharClass('white-space', _one_of(' \t'))

qtext = CharClass('quoted text', lambda c: c not in '\\"\r\n')


def case_char(char):
    """Return a rule matching 'char' without regard to case."""
    upper = char.upper()
    return CharClass("'{}'".format(char), lambda c: c.upper() == upper)

def case_string(string):
    """Return a rule matching 'string' without regard to case.

    The rule returns the text as it appeared in the input.
    """
    rules = [case_char(c) for c in string]
    def match(value):
        rest = value
        for rule in rules:
            try:
                _, rest = rule(rest)
            except errors.HeaderParseError:
                raise _expected("'{}'".format(string), value) from None
        return value[:len(string)], rest
    return match


#
# Combinators
#

def _empty(value):
    return [], value

def exactly(n, rule):
    """Match 'rule' exactly n times in a row.

    If fewer than n matches are found the error is reported at the position
    where the repetition started, not where the last attempt failed.
    """
    def match(value):
        results = []
        rest = value
        for count in range(n):
            try:
                result, rest = rule(rest)
            except errors.HeaderParseError as err:
                exc = errors.UnexpectedEndError if not rest else (
                    errors.HeaderParseError)
                raise exc("expected {} repetitions but found {}: {}".format(
                    n, count, err), value) from err
            results.append(result)
        return results, rest
    return match

def at_least(n, rule):
    """Match 'rule' n or more times."""
    head = exactly(max(n, 0), rule)
    def match(value):
        results, value = head(value)
        while True:
            try:
                result, rest = rule(value)
            except errors.HeaderParseError:
                break
            if len(rest) == len(value):
                # A rule that matched nothing would match forever.
                break
            results.append(result)
            value = rest
        return results, value
    return match

def between(n, m, rule):
    """Match 'rule' at least n times, but no more than m times.

    When n is 0 the counts are tried from m down to 1, each one as a
    complete trial, so the longest run that can be matched wins.  Bounds
    with n < 0 or n > m match nothing and always succeed.
    """
    if n < 0 or n > m:
        return _empty
    if n == m:
        return exactly(n, rule)
    if n == 0:
        trials = [exactly(count, rule) for count in range(m, 0, -1)]
        def match(value):
            for trial in trials:
                try:
                    return trial(value)
                except errors.HeaderParseError:
                    continue
            return [], value
        return match
    head = exactly(n, rule)
    tail = between(0, m - n, rule)
    def match(value):
        results, value = head(value)
        more, value = tail(value)
        return results + more, value
    return match

def optional(rule, default=None):
    """Match 'rule' or nothing; in the latter case return 'default'."""
    def match(value):
        try:
            return rule(value)
        except errors.HeaderParseError:
            return default, value
    return match

def first_of(*rules, label=None):
    """Try each rule in turn from the same position; return the first match.

    If none match, the error names 'label' if it was given, otherwise the
    error from the last alternative is raised.
    """
    def match(value):
        error = None
        for rule in rules:
            try:
                return rule(value)
            except errors.HeaderParseError as err:
                error = err
        if label is not None or error is None:
            raise _expected(label or 'alternative', value)
        raise error
    return match


#
# Line breaks and linear white space
#

def crlf(value):
    """Match the Internet newline, CR LF."""
    if not value.startswith('\r\n'):
        raise _expected('carriage return followed by linefeed', value)
    return value[:2], value[2:]

_NONSTANDARD_NEWLINES = ('\r\n', '\n\r', '\r', '\n')

def crlf_ns(value):
    """Match any of CR LF, LF CR, CR, or LF, tried in that order.

    This is only appropriate for text that has been stored and perhaps had
    its line endings rewritten; live protocol input must use crlf.
    """
    for newline in _NONSTANDARD_NEWLINES:
        if value.startswith(newline):
            return newline, value[len(newline):]
    raise _expected('eol sequence', value)

_wsp_run = at_least(1, wsp)

def lwsp(value, newline=crlf):
    """Match linear white space: 1*(1*WSP / newline 1*WSP).

    A newline is consumed only if at least one WSP follows it, so a bare
    line break is left for the caller.  The text consumed is returned
    as-is; 'newline' selects the line break rule.
    """
    runs = []
    rest = value
    while True:
        try:
            chars, rest = _wsp_run(rest)
            runs.extend(chars)
            continue
        except errors.HeaderParseError:
            pass
        try:
            brk, after = newline(rest)
            chars, after = _wsp_run(after)
        except errors.HeaderParseError:
            break
        runs.append(brk)
        runs.extend(chars)
        rest = after
    if not runs:
        raise _expected('linear white-space', value)
    return ''.join(runs), rest


#
# Quoted content
#

def quoted_pair(value):
    """quoted-pair = "\\" <any character except CR and LF>"""
    if not value or value[0] != '\\':
        raise _expected('quoted pair', value)
    if len(value) < 2 or value[1] in '\r\n':
        raise _expected('quoted pair', value)
    return value[:2], value[2:]

_qtext_run = at_least(1, qtext)

def _qcontent(value):
    try:
        chars, rest = _qtext_run(value)
    except errors.HeaderParseError:
        return quoted_pair(value)
    return ''.join(chars), rest

_qcontents = at_least(0, _qcontent)

def quoted_string(value):
    """quoted-string = DQUOTE *(1*qtext / quoted-pair) DQUOTE

    The specials backslash and double quote must be escaped inside the
    string; CR and LF are not allowed at all.  The string is returned with
    its quotes and escapes intact.
    """
    _, rest = dquote(value)
    parts, rest = _qcontents(rest)
    if not rest or rest[0] != '"':
        raise _expected('closing quote', rest)
    return '"' + ''.join(parts) + '"', rest[1:]
