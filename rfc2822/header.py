"""Header classes and the header factory.

A header object is a str subclass whose string value is the canonical
form of the field value.  The grammar used to parse the value is chosen
from the field name by a HeaderFactory; the result of the parse is made
available through typed attributes such as 'datetime', 'addresses' and
'message_ids'.

"""

__all__ = [
    'Mailbox',
    'Group',
    'BaseHeader',
    'HeaderFactory',
    ]

import logging
import datetime

from rfc2822 import utils
from rfc2822 import errors
from rfc2822 import _policybase
from rfc2822 import _header_value_parser as parser

logger = logging.getLogger(__name__)


# Address Support Classes #

class Mailbox(str):

    def __new__(cls, value, display_name, local_part, domain, defects):
        self = str.__new__(cls, value)
        self._display_name = display_name
        self._local_part = local_part if local_part is not None else ''
        self._domain = domain if domain is not None else ''
        self._defects = tuple(defects)
        return self

    @property
    def display_name(self):
        return self._display_name

    @property
    def local_part(self):
        return self._local_part

    @property
    def domain(self):
        return self._domain

    @property
    def defects(self):
        return self._defects

    @property
    def addr_spec(self):
        nameset = set(self.local_part)
        if len(nameset) > len(nameset-parser.ATOM_ENDS):
            lp = parser.quote_string(self.local_part)
        else:
            lp = self.local_part
        return lp + '@' + self.domain

    @property
    def reformatted(self):
        if not self.display_name:
            return self.addr_spec
        nameset = set(self.display_name)
        if len(nameset) > len(nameset-parser.SPECIALS):
            disp = parser.quote_string(self.display_name)
        else:
            disp = self.display_name
        return "{} <{}>".format(disp, self.addr_spec)

    def __getnewargs__(self):
        return (str(self), self.display_name, self.local_part, self.domain,
                self.defects)


class Group(str):

    def __new__(cls, value, display_name, mailboxes):
        self = str.__new__(cls, value)
        self._display_name = display_name
        self._mailboxes = tuple(mailboxes)
        return self

    @property
    def display_name(self):
        return self._display_name

    @property
    def mailboxes(self):
        return self._mailboxes

    def __getnewargs__(self):
        return (str(self), self.display_name, self.mailboxes)


def make_mailbox(token):
    """Return a Mailbox built from a 'mailbox' parse tree token."""
    return Mailbox(str(token).strip(),
                   token.display_name,
                   token.local_part,
                   token.domain,
                   token.all_defects)

def make_address(token):
    """Return a Mailbox or a Group built from an 'address' token."""
    if token[0].token_type == 'group':
        return Group(str(token).strip(),
                     token.display_name,
                     [make_mailbox(mb) for mb in token.mailboxes])
    return make_mailbox(token[0])


def _grammar_failure(cls, value, err, kwds):
    # A failed parse leaves no partial value behind, only the defect.
    logger.debug("%s could not parse %r: %s", cls.__name__, value, err)
    kwds['defects'].append(errors.InvalidHeaderDefect(str(err)))


# Header Classes #

class BaseHeader(str):

    """Base class for message headers.

    Implements generic behavior and provides tools for subclasses.

    A subclass must define a classmethod named 'parse' that takes a value
    and a dictionary as its arguments.  The dictionary will contain two
    keys: 'defects', initialized to an empty list, and 'policy', the policy
    the value is to be parsed under.  After the call the dictionary must
    contain an additional key, 'decoded', set to the canonical string form
    of the value.

    The defects key is intended to collect parsing defects.  The parser
    should not raise errors for a value that does not match its grammar;
    instead an InvalidHeaderDefect describing where matching stopped is
    added to the list and the typed attributes are left empty.  If the
    policy has raise_on_defect set, the first defect is raised once
    parsing is complete.

    The parse method may add additional keys to the dictionary.  In this case
    the subclass must define an 'init' method, which will be passed the
    dictionary as its keyword arguments.  The method should use (usually by
    setting them as the value of similarly named attributes) and remove all the
    extra keys added by its parse method, and then use super to call its parent
    class with the remaining arguments and keywords.

    The subclass should also make sure that a 'max_count' attribute is defined
    that is either None or 1.

    """

    def __new__(cls, name, value, *, policy=_policybase.default):
        kwds = {'defects': [], 'policy': policy}
        cls.parse(value, kwds)
        del kwds['policy']
        if policy.raise_on_defect and kwds['defects']:
            raise kwds['defects'][0]
        self = str.__new__(cls, kwds['decoded'])
        source = value if isinstance(value, str) else None
        self.init(name, source=source, **kwds)
        return self

    def init(self, name, *, source, decoded, defects):
        self._name = name
        self._source = source
        self._value = decoded
        self._defects = defects

    @property
    def name(self):
        return self._name

    @property
    def source(self):
        return self._source

    @property
    def value(self):
        return self._value

    @property
    def defects(self):
        return tuple(self._defects)


class UnstructuredHeader:

    max_count = None

    @classmethod
    def parse(cls, value, kwds):
        unstructured = parser.get_unstructured(value, kwds['policy'])
        kwds['defects'].extend(unstructured.all_defects)
        kwds['decoded'] = str(unstructured)


class UniqueUnstructuredHeader(UnstructuredHeader):

    max_count = 1


class DateHeader:

    """Header whose value consists of a single timestamp.

    Provides two additional attributes: date_time, the parse tree of the
    value, and datetime, which is either an aware datetime using a timezone,
    or a naive datetime if the timezone in the input string is -0000 or
    otherwise unknown.  Also accepts a datetime as input.  The 'value'
    attribute is the normalized form of the timestamp, which means it is
    the output of format_datetime on the datetime.

    A value that matches the grammar but names an impossible time (such as
    the 31st of April) registers an InvalidDateDefect.
    """

    max_count = None

    @classmethod
    def parse(cls, value, kwds):
        kwds['date_time'] = kwds['datetime'] = None
        if not value:
            kwds['defects'].append(errors.HeaderMissingRequiredValue())
            kwds['decoded'] = ''
            return
        if isinstance(value, datetime.datetime):
            kwds['datetime'] = value
            kwds['decoded'] = utils.format_datetime(value)
            return
        kwds['decoded'] = value
        try:
            date_time = utils.parse_value(parser.get_date_time, value,
                                          kwds['policy'])
        except errors.HeaderParseError as err:
            _grammar_failure(cls, value, err, kwds)
            return
        kwds['defects'].extend(date_time.all_defects)
        kwds['date_time'] = date_time
        try:
            kwds['datetime'] = date_time.datetime
        except ValueError as err:
            kwds['defects'].append(errors.InvalidDateDefect(str(err)))
            return
        kwds['decoded'] = utils.format_datetime(kwds['datetime'])

    def init(self, *args, **kw):
        self._datetime = kw.pop('datetime')
        self._date_time = kw.pop('date_time')
        super().init(*args, **kw)

    @property
    def datetime(self):
        return self._datetime

    @property
    def date_time(self):
        return self._date_time


class UniqueDateHeader(DateHeader):

    max_count = 1


class AddressHeader:

    max_count = None

    @classmethod
    def parse(cls, value, kwds):
        kwds['addresses'] = ()
        kwds['decoded'] = value
        try:
            address_list = utils.parse_value(parser.get_address_list, value,
                                             kwds['policy'])
        except errors.HeaderParseError as err:
            _grammar_failure(cls, value, err, kwds)
            return
        kwds['addresses'] = tuple(make_address(addr)
                                  for addr in address_list.addresses)
        kwds['defects'].extend(address_list.all_defects)
        kwds['decoded'] = ', '.join([str(item) for item in kwds['addresses']])

    def init(self, *args, **kw):
        self._addresses = kw.pop('addresses')
        self._mailboxes = tuple(self._flatten())
        super().init(*args, **kw)

    @property
    def addresses(self):
        return self._addresses

    @property
    def mailboxes(self):
        return self._mailboxes

    def _flatten(self):
        for address in self._addresses:
            if isinstance(address, Group):
                yield from address.mailboxes
            else:
                yield address


class UniqueAddressHeader(AddressHeader):

    max_count = 1


class SingleAddressHeader(AddressHeader):

    @property
    def address(self):
        if len(self.mailboxes)!=1:
            raise ValueError(("value of single address header {} is not "
                "a single address").format(self.name))
        return self.mailboxes[0]


class UniqueSingleAddressHeader(SingleAddressHeader):

    max_count = 1


class MessageIdHeader:

    max_count = None

    @classmethod
    def parse(cls, value, kwds):
        kwds['message_ids'] = ()
        kwds['decoded'] = value
        try:
            id_list = utils.parse_value(parser.get_msg_id_list, value,
                                        kwds['policy'])
        except errors.HeaderParseError as err:
            _grammar_failure(cls, value, err, kwds)
            return
        kwds['message_ids'] = tuple(id_list.message_ids)
        kwds['defects'].extend(id_list.all_defects)
        kwds['decoded'] = ' '.join(kwds['message_ids'])

    def init(self, *args, **kw):
        self._message_ids = kw.pop('message_ids')
        super().init(*args, **kw)

    @property
    def message_ids(self):
        return self._message_ids


class UniqueMessageIdHeader(MessageIdHeader):

    max_count = 1


class UniqueSingleMessageIdHeader(UniqueMessageIdHeader):

    @property
    def message_id(self):
        if len(self.message_ids)!=1:
            raise ValueError(("value of header {} is not a single "
                "msg-id").format(self.name))
        return self.message_ids[0]


# The header factory #

_default_header_map = {
    'subject':          UniqueUnstructuredHeader,
    'comments':         UnstructuredHeader,
    'date':             UniqueDateHeader,
    'resent-date':      DateHeader,
    'sender':           UniqueSingleAddressHeader,
    'resent-sender':    SingleAddressHeader,
    'to':               UniqueAddressHeader,
    'resent-to':        AddressHeader,
    'cc':               UniqueAddressHeader,
    'resent-cc':        AddressHeader,
    'bcc':              UniqueAddressHeader,
    'resent-bcc':       AddressHeader,
    'from':             UniqueAddressHeader,
    'resent-from':      AddressHeader,
    'reply-to':         UniqueAddressHeader,
    'message-id':       UniqueSingleMessageIdHeader,
    'resent-message-id': UniqueSingleMessageIdHeader,
    'in-reply-to':      UniqueMessageIdHeader,
    'references':       UniqueMessageIdHeader,
    }

class HeaderFactory:

    """A header_factory and header registry."""

    def __init__(self, base_class=BaseHeader, default_class=UnstructuredHeader,
                       use_default_map=True):
        """Create a header_factory that works with the Policy API.

        base_class is the class that will be the last class in the created
        header class's __bases__ list.  default_class is the class that will be
        used if "name" (see __call__) does not appear in the registry.
        use_default_map controls whether or not the default mapping of names to
        specialized classes is copied in to the registry when the factory is
        created.  The default is True.

        """
        self.registry = {}
        self.base_class = base_class
        self.default_class = default_class
        if use_default_map:
            self.registry.update(_default_header_map)

    def map_to_type(self, name, cls):
        """Register cls as the specialized class for handling "name" headers.

        """
        self.registry[name.lower()] = cls

    def __getitem__(self, name):
        cls = self.registry.get(name.lower(), self.default_class)
        return type('_'+cls.__name__, (cls, self.base_class), {})

    def __call__(self, name, value, *, policy=_policybase.default):
        """Create a header instance for header "name".

        Creates a header instance by creating a specialized class for parsing
        and representing the specified header by combining the factory
        base_class with a specialized class from the registry or the
        default_class, and passing the name, value and policy to the
        constructed class's constructor.

        """
        return self[name](name, value, policy=policy)
