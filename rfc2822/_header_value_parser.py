"""Header value parser implementing the RFC 2822 structured field rules.

The parsing methods defined in this module implement the RFC 2822 grammar
for the structured parts of a message header: folding white space, comments
and quoted strings, date-times (including the obsolete two and three digit
years and named time zones), addresses, and message identifiers.  The
primitive rules they are built from come from RFC 2234 and live in the
_abnf module.

The general structure of the parser follows RFC 2822, and uses its
terminology where there is a direct correspondence.  Where the
implementation requires a somewhat different structure than that used by
the formal grammar, new terms that mimic the closest existing terms are
used.  Thus, it really helps to have a copy of RFC 2822 handy when studying
this code.

Input to the parser is the value of a single field, which may still contain
folds.  A fold is a line break followed by white space; the line break rule
is taken from the policy, so that text which was stored with its line
endings rewritten can be parsed with a lenient policy while live input is
held to CR LF.  A line break that is not followed by white space is never
part of a fold, and is a syntax error anywhere a structured value is
expected.

The output of the parser is a TokenList object, which is a list subclass.  A
TokenList is a recursive data structure.  The terminal nodes of the structure
are Terminal objects, which are subclasses of str.  These do not correspond
directly to terminal objects in the formal grammar, but are instead more
practical higher level combinations of true terminals.

All TokenList and Terminal objects have a 'value' attribute, which produces the
semantically meaningful value of that part of the parse subtree.  The value of
all whitespace tokens (no matter how many sub-tokens they may contain) is a
single space, as per the RFC rules.  This includes 'CFWS', which is herein
included in the general class of whitespace tokens.  There is one exception to
the rule that whitespace tokens are collapsed into single spaces in values: in
the value of a 'bare-quoted-string' (a quoted-string with no leading or
trailing whitespace), any whitespace that appeared between the quotation marks
is preserved in the returned value.  Note that in all Terminal strings quoted
pairs are turned into their unquoted values.

All TokenList and Terminal objects also have a string value, which attempts to
be a "canonical" representation of the RFC-compliant form of the substring that
produced the parsed subtree, including minimal use of quoted pair quoting.
Whitespace runs are not collapsed, but the line breaks of folds are removed.

Comment tokens also have a 'content' attribute providing the string found
between the parens (including any nested comments) with whitespace preserved.

All TokenList and Terminal objects have a 'defects' attribute which is a
possibly empty list all of the defects found while creating the token.
Defects are only recorded here; a policy with raise_on_defect set raises
the first of them once a whole value has been parsed.  A composite list of all
defects in the subtree is available through the 'all_defects' attribute of
any node.  (For Terminal notes x.defects == x.all_defects.)

Each object in a parse tree is called a 'token', and each has a 'token_type'
attribute that gives the name from the RFC 2822 grammar that it represents.
Not all RFC 2822 nodes are produced, and there is one non-RFC 2822 node that
may be produced: 'ptext'.  A 'ptext' is a string of printable ascii characters.
It is returned in place of lists of (ctext/quoted-pair) and
(qtext/quoted-pair).

"""

import re
import datetime
from rfc2822 import _abnf
from rfc2822 import _policybase
from rfc2822 import errors

#
# Useful constants and functions
#

WSP = set(' \t')
SPECIALS = set(r'()<>@,:;.\"[]')
ATOM_ENDS = SPECIALS | WSP | set('\r\n')
# '.', '"', and '(' do not end phrases in order to support obs-phrase
PHRASE_ENDS = SPECIALS - set('."(')

_DAY_NAMES = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
_MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
                'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

# Offsets in minutes east of UTC.
_OBS_ZONES = {
    'UT': 0, 'GMT': 0,
    'EST': -5*60, 'EDT': -4*60,
    'CST': -6*60, 'CDT': -5*60,
    'MST': -7*60, 'MDT': -6*60,
    'PST': -8*60, 'PDT': -7*60,
    'Z': 0,
    }
# RFC 822 got the signs of the military zones backwards, so RFC 2822 says
# they carry no usable offset.  'J' was never assigned.
_MILITARY_ZONES = set('ABCDEFGHIKLMNOPQRSTUVWXY')

def quote_string(value):
    return '"'+str(value).replace('\\', '\\\\').replace('"', r'\"')+'"'

def _newline_rule(policy):
    return _abnf.crlf_ns if policy.lenient_newlines else _abnf.crlf

def _starts_fws(value, policy):
    if not value:
        return False
    if value[0] in WSP:
        return True
    try:
        _, rest = _newline_rule(policy)(value)
    except errors.HeaderParseError:
        return False
    return bool(rest) and rest[0] in WSP

def _starts_cfws(value, policy):
    return bool(value) and (value[0] == '(' or _starts_fws(value, policy))

#
# TokenList and its subclasses
#

class TokenList(list):

    token_type = None

    def __init__(self, *args, **kw):
        super().__init__(*args, **kw)
        self.defects = []

    def __str__(self):
        return ''.join(str(x) for x in self)

    def __repr__(self):
        return '{}({})'.format(self.__class__.__name__,
                             super().__repr__())

    @property
    def value(self):
        return ''.join(x.value for x in self if x.value)

    @property
    def all_defects(self):
        return sum((x.all_defects for x in self), self.defects)

    def pprint(self, indent=''):
        print('{}{}/{}('.format(
            indent,
            self.__class__.__name__,
            self.token_type))
        for token in self:
            token.pprint(indent+'    ')
        if self.defects:
            extra = ' Defects: {}'.format(self.defects)
        else:
            extra = ''
        print('{}){}'.format(indent, extra))

    def _first(self, token_type):
        for x in self:
            if x.token_type == token_type:
                return x


class WhiteSpaceTokenList(TokenList):

    @property
    def value(self):
        return ' '

    @property
    def comments(self):
        return [x.content for x in self if x.token_type=='comment']


class UnstructuredTokenList(TokenList):

    token_type = 'unstructured'


class Phrase(TokenList):

    token_type = 'phrase'


class CFWSList(WhiteSpaceTokenList):

    token_type = 'cfws'


class Atom(TokenList):

    token_type = 'atom'


class QuotedString(TokenList):

    token_type = 'quoted-string'

    @property
    def content(self):
        for x in self:
            if x.token_type == 'bare-quoted-string':
                return x.value

    @property
    def quoted_value(self):
        res = []
        for x in self:
            if x.token_type == 'bare-quoted-string':
                res.append(str(x))
            else:
                res.append(x.value)
        return ''.join(res)


class BareQuotedString(QuotedString):

    token_type = 'bare-quoted-string'

    def __str__(self):
        return quote_string(''.join(str(x) for x in self))

    @property
    def value(self):
        return ''.join(str(x) for x in self)


class Comment(WhiteSpaceTokenList):

    token_type = 'comment'

    def __str__(self):
        return ''.join(sum([
                            ["("],
                            [self.quote(x) for x in self],
                            [")"],
                            ], []))

    def quote(self, value):
        if value.token_type == 'comment':
            return str(value)
        return str(value).replace('\\', '\\\\').replace(
                                  '(', r'\(').replace(
                                  ')', r'\)')

    @property
    def content(self):
        return ''.join(str(x) for x in self)

    @property
    def comments(self):
        return [self.content]


class AddressList(TokenList):

    token_type = 'address-list'

    @property
    def addresses(self):
        return [x for x in self if x.token_type=='address']

    @property
    def mailboxes(self):
        return sum((x.mailboxes
                    for x in self if x.token_type=='address'), [])


class Address(TokenList):

    token_type = 'address'

    @property
    def display_name(self):
        return self[0].display_name

    @property
    def mailboxes(self):
        if self[0].token_type == 'mailbox':
            return [self[0]]
        return self[0].mailboxes


class MailboxList(TokenList):

    token_type = 'mailbox-list'

    @property
    def mailboxes(self):
        return [x for x in self if x.token_type=='mailbox']


class GroupList(TokenList):

    token_type = 'group-list'

    @property
    def mailboxes(self):
        for x in self:
            if x.token_type == 'mailbox-list':
                return x.mailboxes
        return []


class Group(TokenList):

    token_type = "group"

    @property
    def mailboxes(self):
        if self[2].token_type != 'group-list':
            return []
        return self[2].mailboxes

    @property
    def display_name(self):
        return self[0].display_name


class NameAddr(TokenList):

    token_type = 'name-addr'

    @property
    def display_name(self):
        if len(self) == 1:
            return None
        return self[0].display_name

    @property
    def local_part(self):
        return self[-1].local_part

    @property
    def domain(self):
        return self[-1].domain

    @property
    def route(self):
        return self[-1].route

    @property
    def addr_spec(self):
        return self[-1].addr_spec


class AngleAddr(TokenList):

    token_type = 'angle-addr'

    @property
    def local_part(self):
        return self._first('addr-spec').local_part

    @property
    def domain(self):
        return self._first('addr-spec').domain

    @property
    def route(self):
        route = self._first('obs-route')
        if route is not None:
            return route.domains

    @property
    def addr_spec(self):
        return self._first('addr-spec').addr_spec


class ObsRoute(TokenList):

    token_type = 'obs-route'

    @property
    def domains(self):
        return [x.domain for x in self if x.token_type == 'domain']


class Mailbox(TokenList):

    token_type = 'mailbox'

    @property
    def display_name(self):
        if self[0].token_type == 'name-addr':
            return self[0].display_name

    @property
    def local_part(self):
        return self[0].local_part

    @property
    def domain(self):
        return self[0].domain

    @property
    def route(self):
        if self[0].token_type == 'name-addr':
            return self[0].route

    @property
    def addr_spec(self):
        return self[0].addr_spec


class Domain(TokenList):

    token_type = 'domain'

    @property
    def domain(self):
        return ''.join(super().value.split())


class DotAtom(TokenList):

    token_type = 'dot-atom'


class DotAtomText(TokenList):

    token_type = 'dot-atom-text'


class AddrSpec(TokenList):

    token_type = 'addr-spec'

    @property
    def local_part(self):
        return self[0].local_part

    @property
    def domain(self):
        return self[-1].domain

    @property
    def value(self):
        return self[0].value.rstrip()+self[1].value+self[2].value.lstrip()

    @property
    def addr_spec(self):
        nameset = set(self.local_part)
        if len(nameset) > len(nameset-ATOM_ENDS):
            lp = quote_string(self.local_part)
        else:
            lp = self.local_part
        return lp + '@' + self.domain


class DisplayName(TokenList):

    token_type = 'display-name'

    @staticmethod
    def _edge_is_cfws(token, index):
        if token.token_type == 'cfws':
            return True
        return (isinstance(token, TokenList) and
                token[index].token_type == 'cfws')

    @property
    def display_name(self):
        res = TokenList(self)
        if res[0].token_type == 'cfws':
            res.pop(0)
        elif self._edge_is_cfws(res[0], 0):
            res[0] = TokenList(res[0][1:])
        if res[-1].token_type == 'cfws':
            res.pop()
        elif self._edge_is_cfws(res[-1], -1):
            res[-1] = TokenList(res[-1][:-1])
        return res.value

    @property
    def value(self):
        quote = False
        if self.defects:
            quote = True
        else:
            for x in self:
                if x.token_type == 'quoted-string':
                    quote = True
        if quote:
            pre = post = ''
            if self._edge_is_cfws(self[0], 0):
                pre = ' '
            if self._edge_is_cfws(self[-1], -1):
                post = ' '
            return pre+quote_string(self.display_name)+post
        else:
            return super().value


class LocalPart(TokenList):

    token_type = 'local-part'

    @property
    def value(self):
        if self[0].token_type == "quoted-string":
            return self[0].quoted_value
        else:
            return self[0].value

    @property
    def local_part(self):
        res = TokenList(self[0])
        if res[0].token_type == 'cfws':
            res.pop(0)
        if res[-1].token_type == 'cfws':
            res.pop()
        return res.value


class DomainLiteral(TokenList):

    token_type = 'domain-literal'

    @property
    def domain(self):
        return ''.join(super().value.split())

    @property
    def ip(self):
        for x in self:
            if x.token_type == 'ptext':
                return x.value


class MsgId(TokenList):

    token_type = 'msg-id'

    @property
    def message_id(self):
        return '<{}@{}>'.format(self._first('id-left').value.strip(),
                                self._first('domain').domain)


class MessageIdList(TokenList):

    token_type = 'message-id-list'

    @property
    def message_ids(self):
        return [x.message_id for x in self if x.token_type == 'msg-id']


class DateTime(TokenList):

    token_type = 'date-time'

    @property
    def day_of_week(self):
        day = self._first('day-of-week')
        if day is not None:
            return day.day_name

    @property
    def day(self):
        return self._first('date').day

    @property
    def month(self):
        return self._first('date').month

    @property
    def year(self):
        return self._first('date').year

    @property
    def hour(self):
        return self._first('time').hour

    @property
    def minute(self):
        return self._first('time').minute

    @property
    def second(self):
        return self._first('time').second

    @property
    def zone_offset(self):
        return self._first('time').zone.offset

    @property
    def zone_unknown(self):
        return self._first('time').zone.unknown

    @property
    def datetime(self):
        """An aware datetime, or a naive one if the zone is unknown.

        Raises ValueError if the fields do not name a real point in time.
        """
        if self.zone_unknown:
            tzinfo = None
        else:
            tzinfo = datetime.timezone(
                datetime.timedelta(minutes=self.zone_offset))
        return datetime.datetime(self.year, self.month, self.day,
                                 self.hour, self.minute, self.second or 0,
                                 tzinfo=tzinfo)


class DayOfWeek(TokenList):

    token_type = 'day-of-week'

    @property
    def day_name(self):
        name = self._first('day-name')
        return _DAY_NAMES[[x.upper() for x in _DAY_NAMES].index(name.upper())]


class Date(TokenList):

    token_type = 'date'

    @property
    def day(self):
        return int(self._first('day'))

    @property
    def month(self):
        name = self._first('month-name').upper()
        return [x.upper() for x in _MONTH_NAMES].index(name) + 1

    @property
    def year(self):
        text = self._first('year')
        year = int(text)
        if len(text) == 2:
            year += 2000 if year < 50 else 1900
        elif len(text) == 3:
            year += 1900
        return year


class Time(TokenList):

    token_type = 'time'

    @property
    def hour(self):
        return int(self._first('hour'))

    @property
    def minute(self):
        return int(self._first('minute'))

    @property
    def second(self):
        second = self._first('second')
        if second is not None:
            return int(second)

    @property
    def zone(self):
        return self._first('zone')


class Zone(TokenList):

    token_type = 'zone'

    @property
    def offset(self):
        text = self[-1]
        if text.token_type == 'obs-zone':
            return _OBS_ZONES.get(text.upper(), 0)
        minutes = int(text[1:3])*60 + int(text[3:5])
        return -minutes if text[0] == '-' else minutes

    @property
    def unknown(self):
        text = self[-1]
        if text.token_type == 'obs-zone':
            return text.upper() not in _OBS_ZONES
        return text == '-0000'


#
# Terminal classes and instances
#

class Terminal(str):

    def __new__(cls, value, token_type):
        self = super().__new__(cls, value)
        self.token_type = token_type
        self.defects = []
        return self

    def __repr__(self):
        return "{}({})".format(self.__class__.__name__, super().__repr__())

    @property
    def all_defects(self):
        return list(self.defects)

    def pprint(self, indent=''):
        print("{}{}/{}({})".format(
            indent,
            self.__class__.__name__,
            self.token_type,
            super().__repr__()))


class WhiteSpaceTerminal(Terminal):

    @property
    def value(self):
        return ' '


class ValueTerminal(Terminal):

    @property
    def value(self):
        return self


# DOT is only ever compared by identity, never modified.
DOT = ValueTerminal('.', 'dot')

#
# Parser
#

"""Parse strings according to RFC 2822 rules.

This is a stateless parser.  Each get_XXX function accepts a string and a
policy and returns either a Terminal or a TokenList representing the RFC
object named by the method and a string containing the remaining unparsed
characters from the input.  Thus a parser method consumes the next syntactic
construct of a given type and returns a token representing the construct
plus the unparsed remainder of the input string.  If the construct is not
present a HeaderParseError is raised, and the caller is free to try another
construct on the same input.

For example, if the first element of a structured header is a 'phrase',
then:

    phrase, value = get_phrase(value)

returns the complete phrase from the start of the string value, plus any
characters left in the string after the phrase is removed.

"""

_non_atom_end_matcher = re.compile(r"[^{}]+".format(
    re.escape(''.join(sorted(ATOM_ENDS))))).match
# Space and tab can only reach a token through a quoted pair, where they
# are legal.
_non_printable_finder = re.compile(r"[\x00-\x08\x0A-\x1F\x7F]").findall
_vtext_matcher = re.compile(r"[^ \t\r\n]+|[\r\n]").match

def _validate_xtext(xtext):
    """If input token contains ASCII non-printables, register a defect."""

    non_printables = _non_printable_finder(xtext)
    if non_printables:
        xtext.defects.append(errors.NonPrintableDefect(non_printables))

def _get_ptext_to_endchars(value, endchars):
    """Scan printables/quoted-pairs until endchars and return unquoted ptext.

    This function turns a run of qcontent, ccontent-without-comments, or
    dtext-with-quoted-printables into a single string by unquoting any
    quoted printables.  The run also ends at white space and at line breaks,
    which belong to the FWS rule.  It returns the string, the remaining
    value, and a flag that is True iff there were any quoted printables
    decoded.

    """
    vchars = []
    had_qp = False
    pos = 0
    while pos < len(value):
        char = value[pos]
        if char == '\\':
            _abnf.quoted_pair(value[pos:])
            vchars.append(value[pos+1])
            had_qp = True
            pos += 2
            continue
        if char in endchars or char in WSP or char in '\r\n':
            break
        vchars.append(char)
        pos += 1
    return ''.join(vchars), value[pos:], had_qp

def get_unstructured(value, policy=_policybase.default):
    """unstructured = (*([FWS] utext) [FWS]) / obs-unstruct
       obs-unstruct = *((*LF *CR *(obs-utext) *LF *CR)) / FWS)
       obs-utext = %d0 / obs-NO-WS-CTL / LF / CR

       obs-NO-WS-CTL is control characters except WSP/CR/LF.

    So, basically, we have printable runs, plus control characters or nulls
    in the obsolete syntax, separated by whitespace.  Folds are unfolded.
    Line breaks that are not part of a fold are kept as their own vtext
    tokens and, like any other non-printable, registered as defects.

    Because an 'unstructured' value must by definition constitute the entire
    value, this 'get' routine does not return a remaining value, only the
    parsed TokenList.

    """
    unstructured = UnstructuredTokenList()
    while value:
        if _starts_fws(value, policy):
            token, value = get_fws(value, policy)
        else:
            vtext = _vtext_matcher(value).group()
            value = value[len(vtext):]
            token = ValueTerminal(vtext, 'vtext')
            _validate_xtext(token)
        unstructured.append(token)
    return unstructured

def get_qp_ctext(value, policy=_policybase.default):
    r"""ctext = <printable ascii except \ ( )>

    This is not the RFC ctext, since we are handling nested comments in comment
    and unquoting quoted-pairs here.  We allow anything except the '()'
    characters, but if we find any ASCII other than the RFC defined printable
    ASCII an NonPrintableDefect is added to the token's defects list.  Since
    quoted pairs are converted to their unquoted values, what is returned is
    a 'ptext' token.  In this case it is a WhiteSpaceTerminal, so it's value
    is ' '.

    """
    ptext, rest, _ = _get_ptext_to_endchars(value, '()')
    if not ptext:
        raise errors.HeaderParseError(
            "expected ctext but found '{}'".format(value), value)
    ptext = WhiteSpaceTerminal(ptext, 'ptext')
    _validate_xtext(ptext)
    return ptext, rest

def get_qcontent(value, policy=_policybase.default):
    """qcontent = qtext / quoted-pair

    We allow anything except the DQUOTE character, but if we find any ASCII
    other than the RFC defined printable ASCII an NonPrintableDefect is
    added to the token's defects list.  Any quoted pairs are converted to their
    unquoted values, so what is returned is a 'ptext' token.  In this case it
    is a ValueTerminal.

    """
    ptext, rest, _ = _get_ptext_to_endchars(value, '"')
    if not ptext:
        raise errors.HeaderParseError(
            "expected qcontent but found '{}'".format(value), value)
    ptext = ValueTerminal(ptext, 'ptext')
    _validate_xtext(ptext)
    return ptext, rest

def get_atext(value, policy=_policybase.default):
    """atext = <matches _atext_matcher>

    We allow any non-ATOM_ENDS in atext, but add an NonPrintableDefect to
    the token's defects list if we find non-printable characters.
    """
    m = _non_atom_end_matcher(value)
    if not m:
        raise errors.HeaderParseError(
            "expected atext but found '{}'".format(value), value)
    atext = m.group()
    value = value[len(atext):]
    atext = ValueTerminal(atext, 'atext')
    _validate_xtext(atext)
    return atext, value

def get_fws(value, policy=_policybase.default):
    """FWS = ([*WSP CRLF] 1*WSP) / obs-FWS
       obs-FWS = 1*WSP *(CRLF 1*WSP)

    This is the linear white space rule of RFC 2234 with the line break
    taken from the policy.  The returned token's string is the white space
    with the line breaks of the folds removed; its value is a single space.

    """
    text, rest = _abnf.lwsp(value, _newline_rule(policy))
    fws = WhiteSpaceTerminal(text.replace('\r', '').replace('\n', ''), 'fws')
    return fws, rest

def get_bare_quoted_string(value, policy=_policybase.default):
    """bare-quoted-string = DQUOTE *([FWS] qcontent) [FWS] DQUOTE

    A quoted-string without the leading or trailing white space.  Its
    value is the text between the quote marks, with whitespace
    preserved and quoted pairs decoded.
    """
    if not value or value[0] != '"':
        raise errors.HeaderParseError(
            "expected '\"' but found '{}'".format(value), value)
    bare_quoted_string = BareQuotedString()
    value = value[1:]
    while value and value[0] != '"':
        if _starts_fws(value, policy):
            token, value = get_fws(value, policy)
        else:
            token, value = get_qcontent(value, policy)
        bare_quoted_string.append(token)
    if not value:
        raise errors.UnexpectedEndError(
            "expected closing '\"' but found end of input", value)
    return bare_quoted_string, value[1:]

def get_comment(value, policy=_policybase.default, depth=0):
    """comment = "(" *([FWS] ccontent) [FWS] ")"
       ccontent = ctext / quoted-pair / comment

    We handle nested comments here, and quoted-pair in our qp-ctext routine.
    'depth' is the number of comments this one is nested in; the policy's
    max_comment_depth bounds it.
    """
    if not value or value[0] != '(':
        raise errors.HeaderParseError(
            "expected '(' but found '{}'".format(value), value)
    if depth >= policy.max_comment_depth:
        raise errors.HeaderParseError(
            "comments nested more than {} deep".format(
                policy.max_comment_depth), value)
    comment = Comment()
    value = value[1:]
    while value and value[0] != ")":
        if _starts_fws(value, policy):
            token, value = get_fws(value, policy)
        elif value[0] == '(':
            token, value = get_comment(value, policy, depth + 1)
        else:
            token, value = get_qp_ctext(value, policy)
        comment.append(token)
    if not value:
        raise errors.UnexpectedEndError(
            "expected closing ')' but found end of input", value)
    return comment, value[1:]

def get_cfws(value, policy=_policybase.default):
    """CFWS = (1*([FWS] comment) [FWS]) / FWS

    """
    cfws = CFWSList()
    while _starts_cfws(value, policy):
        if value[0] == '(':
            token, value = get_comment(value, policy)
        else:
            token, value = get_fws(value, policy)
        cfws.append(token)
    if not cfws:
        exc = errors.HeaderParseError if value else errors.UnexpectedEndError
        raise exc("expected CFWS but found '{}'".format(value), value)
    return cfws, value

def get_quoted_string(value, policy=_policybase.default):
    """quoted-string = [CFWS] <bare-quoted-string> [CFWS]

    'bare-quoted-string' is an intermediate class defined by this
    parser and not by the RFC grammar.  It is the quoted string
    without any attached CFWS.
    """
    quoted_string = QuotedString()
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        quoted_string.append(token)
    token, value = get_bare_quoted_string(value, policy)
    quoted_string.append(token)
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        quoted_string.append(token)
    return quoted_string, value

def get_atom(value, policy=_policybase.default):
    """atom = [CFWS] 1*atext [CFWS]

    """
    atom = Atom()
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        atom.append(token)
    if value and value[0] in ATOM_ENDS:
        raise errors.HeaderParseError(
            "expected atom but found '{}'".format(value), value)
    token, value = get_atext(value, policy)
    atom.append(token)
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        atom.append(token)
    return atom, value

def get_dot_atom_text(value, policy=_policybase.default):
    """ dot-text = 1*atext *("." 1*atext)

    """
    dot_atom_text = DotAtomText()
    if not value or value[0] in ATOM_ENDS:
        raise errors.HeaderParseError("expected atom at a start of "
            "dot-atom-text but found '{}'".format(value), value)
    while value and value[0] not in ATOM_ENDS:
        token, value = get_atext(value, policy)
        dot_atom_text.append(token)
        if value and value[0] == '.':
            dot_atom_text.append(DOT)
            value = value[1:]
    if dot_atom_text[-1] is DOT:
        raise errors.HeaderParseError("expected atom at end of dot-atom-text "
            "but found '{}'".format('.'+value), '.'+value)
    return dot_atom_text, value

def get_dot_atom(value, policy=_policybase.default):
    """ dot-atom = [CFWS] dot-atom-text [CFWS]

    """
    dot_atom = DotAtom()
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        dot_atom.append(token)
    token, value = get_dot_atom_text(value, policy)
    dot_atom.append(token)
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        dot_atom.append(token)
    return dot_atom, value

def get_word(value, policy=_policybase.default):
    """word = atom / quoted-string

    Either atom or quoted-string may start with CFWS.  We have to peel off this
    CFWS first to determine which type of word to parse.  Afterward we splice
    the leading CFWS, if any, into the parsed sub-token.

    If neither an atom or a quoted-string is found before the next special, a
    HeaderParseError is raised.

    The token returned is either an Atom or a QuotedString, as appropriate.
    This means the 'word' level of the formal grammar is not represented in the
    parse tree; this is because having that extra layer when manipulating the
    parse tree is more confusing than it is helpful.

    """
    if _starts_cfws(value, policy):
        leader, value = get_cfws(value, policy)
    else:
        leader = None
    if not value:
        raise errors.UnexpectedEndError(
            "expected 'atom' or 'quoted-string' but found end of input",
            value)
    if value[0]=='"':
        token, value = get_quoted_string(value, policy)
    elif value[0] in SPECIALS:
        raise errors.HeaderParseError("expected 'atom' or 'quoted-string' "
                                      "but found '{}'".format(value), value)
    else:
        token, value = get_atom(value, policy)
    if leader is not None:
        token[:0] = [leader]
    return token, value

def get_phrase(value, policy=_policybase.default):
    """ phrase = 1*word / obs-phrase
        obs-phrase = word *(word / "." / CFWS)

    This means a phrase can be a sequence of words, periods, and CFWS in any
    order as long as it starts with at least one word.  If anything other than
    words is detected, an ObsoleteHeaderDefect is added to the token's defect
    list.

    """
    phrase = Phrase()
    token, value = get_word(value, policy)
    phrase.append(token)
    while value and value[0] not in PHRASE_ENDS:
        if value[0] in '\r\n' and not _starts_fws(value, policy):
            break
        if value[0]=='.':
            phrase.append(DOT)
            phrase.defects.append(errors.ObsoleteHeaderDefect(
                "period in 'phrase'"))
            value = value[1:]
        else:
            try:
                token, value = get_word(value, policy)
            except errors.HeaderParseError:
                if _starts_cfws(value, policy):
                    token, value = get_cfws(value, policy)
                    phrase.defects.append(errors.ObsoleteHeaderDefect(
                        "comment found without atom"))
                else:
                    raise
            phrase.append(token)
    return phrase, value

def get_local_part(value, policy=_policybase.default):
    """ local-part = dot-atom / quoted-string

    """
    local_part = LocalPart()
    leader = None
    if _starts_cfws(value, policy):
        leader, value = get_cfws(value, policy)
    if not value:
        raise errors.UnexpectedEndError(
            "expected local-part but found end of input", value)
    if value[0] == '"':
        token, value = get_quoted_string(value, policy)
    else:
        token, value = get_dot_atom(value, policy)
    if leader is not None:
        token[:0] = [leader]
    local_part.append(token)
    return local_part, value

def get_dtext(value, policy=_policybase.default):
    r""" dtext = <printable ascii except \ [ ]> / obs-dtext
        obs-dtext = obs-NO-WS-CTL / quoted-pair

    We allow anything except the excluded characters, but if we find any
    ASCII other than the RFC defined printable ASCII an NonPrintableDefect is
    added to the token's defects list.  Quoted pairs are converted to their
    unquoted values, so what is returned is a ptext token, in this case a
    ValueTerminal.  If there were quoted-printables, an ObsoleteHeaderDefect is
    added to the returned token's defect list.

    """
    ptext, rest, had_qp = _get_ptext_to_endchars(value, '[]')
    if not ptext:
        raise errors.HeaderParseError(
            "expected dtext but found '{}'".format(value), value)
    ptext = ValueTerminal(ptext, 'ptext')
    if had_qp:
        ptext.defects.append(errors.ObsoleteHeaderDefect(
            "quoted printable found in domain-literal"))
    _validate_xtext(ptext)
    return ptext, rest

def get_domain_literal(value, policy=_policybase.default):
    """ domain-literal = [CFWS] "[" *([FWS] dtext) [FWS] "]" [CFWS]

    """
    domain_literal = DomainLiteral()
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        domain_literal.append(token)
    if not value or value[0] != '[':
        raise errors.HeaderParseError("expected '[' at start of "
            "domain-literal but found '{}'".format(value), value)
    domain_literal.append(ValueTerminal('[', 'domain-literal-start'))
    value = value[1:]
    while value and value[0] != ']':
        if _starts_fws(value, policy):
            token, value = get_fws(value, policy)
        else:
            token, value = get_dtext(value, policy)
        domain_literal.append(token)
    if not value:
        raise errors.UnexpectedEndError(
            "expected closing ']' but found end of input", value)
    domain_literal.append(ValueTerminal(']', 'domain-literal-end'))
    value = value[1:]
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        domain_literal.append(token)
    return domain_literal, value

def get_domain(value, policy=_policybase.default):
    """ domain = dot-atom / domain-literal

    """
    domain = Domain()
    leader = None
    if _starts_cfws(value, policy):
        leader, value = get_cfws(value, policy)
    if not value:
        raise errors.UnexpectedEndError(
            "expected domain but found end of input", value)
    if value[0] == '[':
        token, value = get_domain_literal(value, policy)
    else:
        token, value = get_dot_atom(value, policy)
    if leader is not None:
        token[:0] = [leader]
    domain.append(token)
    return domain, value

def get_addr_spec(value, policy=_policybase.default):
    """ addr-spec = local-part "@" domain

    """
    addr_spec = AddrSpec()
    token, value = get_local_part(value, policy)
    addr_spec.append(token)
    if not value or value[0] != '@':
        raise errors.HeaderParseError(
            "expected '@' after local-part but found '{}'".format(value),
            value)
    addr_spec.append(ValueTerminal('@', 'address-at-symbol'))
    token, value = get_domain(value[1:], policy)
    addr_spec.append(token)
    return addr_spec, value

def get_obs_route(value, policy=_policybase.default):
    """ obs-route = [CFWS] obs-domain-list ":" [CFWS]
        obs-domain-list = "@" domain *(*(CFWS / "," ) [CFWS] "@" domain)

        Returns an obs-route token with the appropriate sub-tokens (that is,
        there is no obs-domain-list in the parse tree).
    """
    obs_route = ObsRoute()
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        obs_route.append(token)
    if not value or value[0] != '@':
        raise errors.HeaderParseError(
            "expected obs-route domain but found '{}'".format(value), value)
    obs_route.append(ValueTerminal('@', 'route-component-marker'))
    token, value = get_domain(value[1:], policy)
    obs_route.append(token)
    while value and (value[0] == ',' or _starts_cfws(value, policy)):
        if value[0] == ',':
            obs_route.append(ValueTerminal(',', 'list-separator'))
            value = value[1:]
        else:
            token, value = get_cfws(value, policy)
            obs_route.append(token)
        if value and value[0] == '@':
            obs_route.append(ValueTerminal('@', 'route-component-marker'))
            token, value = get_domain(value[1:], policy)
            obs_route.append(token)
    if not value or value[0] != ':':
        raise errors.HeaderParseError("expected ':' marking end of "
            "obs-route but found '{}'".format(value), value)
    obs_route.append(ValueTerminal(':', 'end-of-obs-route-marker'))
    return obs_route, value[1:]

def get_angle_addr(value, policy=_policybase.default):
    """ angle-addr = [CFWS] "<" addr-spec ">" [CFWS] / obs-angle-addr
        obs-angle-addr = [CFWS] "<" obs-route addr-spec ">" [CFWS]

    """
    angle_addr = AngleAddr()
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        angle_addr.append(token)
    if not value or value[0] != '<':
        raise errors.HeaderParseError(
            "expected angle-addr but found '{}'".format(value), value)
    angle_addr.append(ValueTerminal('<', 'angle-addr-start'))
    value = value[1:]
    try:
        token, value = get_addr_spec(value, policy)
    except errors.HeaderParseError:
        try:
            token, value = get_obs_route(value, policy)
        except errors.HeaderParseError:
            raise errors.HeaderParseError(
                "expected addr-spec or obs-route but found '{}'".format(
                    value), value) from None
        angle_addr.defects.append(errors.ObsoleteHeaderDefect(
            "obsolete route specification in angle-addr"))
        angle_addr.append(token)
        token, value = get_addr_spec(value, policy)
    angle_addr.append(token)
    if not value or value[0] != '>':
        raise errors.HeaderParseError(
            "expected '>' at end of angle-addr but found '{}'".format(value),
            value)
    angle_addr.append(ValueTerminal('>', 'angle-addr-end'))
    value = value[1:]
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        angle_addr.append(token)
    return angle_addr, value

def get_display_name(value, policy=_policybase.default):
    """ display-name = phrase

    Because this is simply a name-rule, we don't return a display-name
    token containing a phrase, but rather a display-name token with
    the content of the phrase.

    """
    display_name = DisplayName()
    token, value = get_phrase(value, policy)
    display_name.extend(token[:])
    display_name.defects = token.defects[:]
    return display_name, value

def get_name_addr(value, policy=_policybase.default):
    """ name-addr = [display-name] angle-addr

    """
    name_addr = NameAddr()
    # Both the optional display name and the angle-addr can start with cfws.
    leader = None
    if _starts_cfws(value, policy):
        leader, value = get_cfws(value, policy)
    if not value:
        raise errors.UnexpectedEndError(
            "expected name-addr but found end of input", value)
    if value[0] != '<':
        if value[0] in PHRASE_ENDS:
            raise errors.HeaderParseError(
                "expected name-addr but found '{}'".format(value), value)
        token, value = get_display_name(value, policy)
        if leader is not None:
            token[0][:0] = [leader]
            leader = None
        name_addr.append(token)
    token, value = get_angle_addr(value, policy)
    if leader is not None:
        token[:0] = [leader]
    name_addr.append(token)
    return name_addr, value

def get_mailbox(value, policy=_policybase.default):
    """ mailbox = name-addr / addr-spec

    """
    # The only way to figure out if we are dealing with a name-addr or an
    # addr-spec is to try parsing each one.  name-addr goes first: a bare
    # local-part can be a prefix of a display name, but not the reverse.
    mailbox = Mailbox()
    try:
        token, value = get_name_addr(value, policy)
    except errors.HeaderParseError:
        try:
            token, value = get_addr_spec(value, policy)
        except errors.HeaderParseError as err:
            raise errors.HeaderParseError(
                "expected mailbox but found '{}'".format(value),
                err.remaining) from err
    mailbox.append(token)
    return mailbox, value

def get_mailbox_list(value, policy=_policybase.default):
    """ mailbox-list = mailbox *("," mailbox)

    """
    mailbox_list = MailboxList()
    token, value = get_mailbox(value, policy)
    mailbox_list.append(token)
    while value and value[0] == ',':
        mailbox_list.append(ValueTerminal(',', 'list-separator'))
        token, value = get_mailbox(value[1:], policy)
        mailbox_list.append(token)
    return mailbox_list, value

def get_group_list(value, policy=_policybase.default):
    """ group-list = mailbox-list / CFWS

    """
    group_list = GroupList()
    leader = None
    if _starts_cfws(value, policy):
        leader, value = get_cfws(value, policy)
        if value and value[0] == ';':
            group_list.append(leader)
            return group_list, value
    token, value = get_mailbox_list(value, policy)
    if leader is not None:
        token[:0] = [leader]
    group_list.append(token)
    return group_list, value

def get_group(value, policy=_policybase.default):
    """ group = display-name ":" [group-list] ";" [CFWS]

    """
    group = Group()
    token, value = get_display_name(value, policy)
    if not value or value[0] != ':':
        raise errors.HeaderParseError("expected ':' at end of group "
            "display name but found '{}'".format(value), value)
    group.append(token)
    group.append(ValueTerminal(':', 'group-display-name-terminator'))
    value = value[1:]
    if value and value[0] == ';':
        group.append(ValueTerminal(';', 'group-terminator'))
        value = value[1:]
    else:
        token, value = get_group_list(value, policy)
        group.append(token)
        if not value or value[0] != ';':
            raise errors.HeaderParseError(
                "expected ';' at end of group but found '{}'".format(value),
                value)
        group.append(ValueTerminal(';', 'group-terminator'))
        value = value[1:]
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        group.append(token)
    return group, value

def get_address(value, policy=_policybase.default):
    """ address = mailbox / group

    Note that counter-intuitively, an address can be either a single address or
    a list of addresses (a group).  This is why the returned Address object has
    a 'mailboxes' attribute which treats a single address as a list of length
    one.  When you need to differentiate between to two cases, extract the single
    element, which is either a mailbox or a group token.

    """
    # The formal grammar isn't very helpful when parsing an address.  mailbox
    # and group, especially when allowing for obsolete forms, start off very
    # similarly.  It is only when you reach one of @, <, or : that you know
    # what you've got.  So, we try each one in turn, starting with the more
    # likely of the two.
    address = Address()
    try:
        token, value = get_group(value, policy)
    except errors.HeaderParseError:
        try:
            token, value = get_mailbox(value, policy)
        except errors.HeaderParseError as err:
            raise errors.HeaderParseError(
                "expected address but found '{}'".format(value),
                err.remaining) from err
    address.append(token)
    return address, value

def get_address_list(value, policy=_policybase.default):
    """ address-list = address *("," address)

    Parsing stops at the first character that cannot continue the list; it
    is up to the caller to decide whether anything left over is an error.

    """
    address_list = AddressList()
    token, value = get_address(value, policy)
    address_list.append(token)
    while value and value[0] == ',':
        address_list.append(ValueTerminal(',', 'list-separator'))
        token, value = get_address(value[1:], policy)
        address_list.append(token)
    return address_list, value

#
# Message identifiers
#

def get_msg_id(value, policy=_policybase.default):
    """ msg-id = [CFWS] "<" id-left "@" id-right ">" [CFWS]
        id-left = dot-atom-text / no-fold-quote / obs-id-left
        id-right = dot-atom-text / no-fold-literal / obs-id-right

    The obsolete forms are local-part and domain, which include the
    others, so those are what we parse.
    """
    msg_id = MsgId()
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        msg_id.append(token)
    if not value or value[0] != '<':
        raise errors.HeaderParseError(
            "expected msg-id but found '{}'".format(value), value)
    msg_id.append(ValueTerminal('<', 'msg-id-start'))
    token, value = get_local_part(value[1:], policy)
    token.token_type = 'id-left'
    msg_id.append(token)
    if not value or value[0] != '@':
        raise errors.HeaderParseError(
            "expected '@' in msg-id but found '{}'".format(value), value)
    msg_id.append(ValueTerminal('@', 'address-at-symbol'))
    token, value = get_domain(value[1:], policy)
    msg_id.append(token)
    if not value or value[0] != '>':
        raise errors.HeaderParseError(
            "expected '>' at end of msg-id but found '{}'".format(value),
            value)
    msg_id.append(ValueTerminal('>', 'msg-id-end'))
    value = value[1:]
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        msg_id.append(token)
    return msg_id, value

def get_msg_id_list(value, policy=_policybase.default):
    """ references = 1*msg-id

    Used for both In-Reply-To and References.
    """
    msg_id_list = MessageIdList()
    token, value = get_msg_id(value, policy)
    msg_id_list.append(token)
    while value and value[0] != ',':
        try:
            token, value = get_msg_id(value, policy)
        except errors.HeaderParseError:
            break
        msg_id_list.append(token)
    return msg_id_list, value

#
# Date and time
#

def _get_digits(value, low, high, token_type):
    try:
        digits, rest = _abnf.between(low, high, _abnf.digit)(value)
    except errors.HeaderParseError as err:
        exc = type(err) if isinstance(err, errors.UnexpectedEndError) else (
            errors.HeaderParseError)
        raise exc("expected {} but found '{}'".format(token_type, value),
                  value) from None
    return ValueTerminal(''.join(digits), token_type), rest

def _get_name(value, names, token_type):
    rule = _abnf.first_of(*[_abnf.case_string(name) for name in names],
                          label=token_type)
    text, rest = rule(value)
    if rest and rest[0] in _abnf.alpha:
        raise errors.HeaderParseError(
            "expected {} but found '{}'".format(token_type, value), value)
    return ValueTerminal(text, token_type), rest

def get_day_of_week(value, policy=_policybase.default):
    """ day-of-week = ([FWS] day-name) / obs-day-of-week
        obs-day-of-week = [CFWS] day-name [CFWS]
        day-name = "Mon" / "Tue" / "Wed" / "Thu" / "Fri" / "Sat" / "Sun"

    Day names are matched without regard to case.
    """
    day_of_week = DayOfWeek()
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        day_of_week.append(token)
    token, value = _get_name(value, _DAY_NAMES, 'day-name')
    day_of_week.append(token)
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        day_of_week.append(token)
    return day_of_week, value

def get_date(value, policy=_policybase.default):
    """ date = day month year
        day = ([FWS] 1*2DIGIT) / obs-day
        month = (FWS month-name FWS) / obs-month
        year = 4*DIGIT / obs-year
        obs-day = [CFWS] 1*2DIGIT [CFWS]
        obs-month = CFWS month-name CFWS
        obs-year = [CFWS] 2*DIGIT [CFWS]

    Years of two or three digits are obsolete and register an
    ObsoleteHeaderDefect; the Date token's 'year' attribute normalizes them.
    White space after the year belongs to the date-time rule.
    """
    date = Date()
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        date.append(token)
    token, value = _get_digits(value, 1, 2, 'day')
    date.append(token)
    token, value = get_cfws(value, policy)
    date.append(token)
    token, value = _get_name(value, _MONTH_NAMES, 'month-name')
    date.append(token)
    token, value = get_cfws(value, policy)
    date.append(token)
    token, value = _get_digits(value, 2, 4, 'year')
    if len(token) < 4:
        date.defects.append(errors.ObsoleteHeaderDefect(
            "{}-digit year".format(len(token))))
    date.append(token)
    return date, value

def _get_time_separator(time, value, policy):
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        time.append(token)
    if not value or value[0] != ':':
        raise errors.HeaderParseError(
            "expected ':' in time-of-day but found '{}'".format(value), value)
    time.append(ValueTerminal(':', 'time-separator'))
    value = value[1:]
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        time.append(token)
    return value

def get_zone(value, policy=_policybase.default):
    """ zone = (( "+" / "-" ) 4DIGIT) / obs-zone
        obs-zone = "UT" / "GMT" / "EST" / "EDT" / "CST" / "CDT" /
                   "MST" / "MDT" / "PST" / "PDT" /
                   %d65-73 / %d75-90 / %d97-105 / %d107-122

    The last two digits of a numeric zone are minutes and must be 00-59.
    A zone of -0000, or a military zone other than Z, leaves the offset
    unknown; see the Zone token's 'unknown' attribute.
    """
    zone = Zone()
    if value and value[0] in '+-':
        token, rest = _get_digits(value[1:], 4, 4, 'zone')
        if token[2:] > '59':
            raise errors.HeaderParseError(
                "zone minutes out of range in '{}'".format(value), value)
        zone.append(ValueTerminal(value[0] + token, 'zone'))
        return zone, rest
    if not value:
        raise errors.UnexpectedEndError(
            "expected zone but found end of input", value)
    m = _non_atom_end_matcher(value)
    name = m.group() if m else ''
    if not (name.upper() in _OBS_ZONES or
            len(name) == 1 and name.upper() in _MILITARY_ZONES):
        raise errors.HeaderParseError(
            "expected zone but found '{}'".format(value), value)
    token = ValueTerminal(name, 'obs-zone')
    token.defects.append(errors.ObsoleteHeaderDefect(
        "obsolete time zone '{}'".format(name)))
    zone.append(token)
    return zone, value[len(name):]

def get_time(value, policy=_policybase.default):
    """ time = time-of-day FWS zone
        time-of-day = hour ":" minute [ ":" second ]
        hour = 2DIGIT / obs-hour
        obs-hour = [CFWS] 2DIGIT [CFWS]

    and likewise for minute and second.
    """
    time = Time()
    token, value = _get_digits(value, 2, 2, 'hour')
    time.append(token)
    value = _get_time_separator(time, value, policy)
    token, value = _get_digits(value, 2, 2, 'minute')
    time.append(token)
    ws = None
    if _starts_cfws(value, policy):
        ws, value = get_cfws(value, policy)
    if value and value[0] == ':':
        if ws is not None:
            time.append(ws)
        value = _get_time_separator(time, value, policy)
        token, value = _get_digits(value, 2, 2, 'second')
        time.append(token)
        ws = None
        if _starts_cfws(value, policy):
            ws, value = get_cfws(value, policy)
    if ws is None:
        exc = errors.HeaderParseError if value else errors.UnexpectedEndError
        raise exc("expected FWS before zone but found '{}'".format(value),
                  value)
    time.append(ws)
    token, value = get_zone(value, policy)
    time.append(token)
    return time, value

def get_date_time(value, policy=_policybase.default):
    """ date-time = [ day-of-week "," ] date FWS time [CFWS]

    """
    date_time = DateTime()
    leader = None
    if _starts_cfws(value, policy):
        leader, value = get_cfws(value, policy)
    if value and value[0] in _abnf.alpha:
        token, value = get_day_of_week(value, policy)
        if leader is not None:
            token[:0] = [leader]
            leader = None
        date_time.append(token)
        if not value:
            raise errors.UnexpectedEndError(
                "expected ',' after day-of-week but found end of input", value)
        if value[0] != ',':
            raise errors.HeaderParseError(
                "expected ',' after day-of-week but found '{}'".format(value),
                value)
        date_time.append(ValueTerminal(',', 'day-of-week-separator'))
        value = value[1:]
    token, value = get_date(value, policy)
    if leader is not None:
        token[:0] = [leader]
    date_time.append(token)
    token, value = get_cfws(value, policy)
    date_time.append(token)
    token, value = get_time(value, policy)
    date_time.append(token)
    if _starts_cfws(value, policy):
        token, value = get_cfws(value, policy)
        date_time.append(token)
    return date_time, value
