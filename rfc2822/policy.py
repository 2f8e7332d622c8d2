"""Policy framework for the rfc2822 package.

Allows fine grained feature control of how the package parses header text.
"""

from rfc2822 import header
from rfc2822 import _policybase

__all__ = [
    'Policy',
    'default',
    'strict',
    'stored',
    'SMTP',
    ]


class Policy(_policybase.Policy):

    """Controls for how header fields are interpreted.

    In addition to the attributes of the parser level policy (see
    rfc2822._policybase.Policy), a Policy has:

    header_factory      -- a callable that can be used to create a new header
                           object given a name and a value.  See the header
                           documentation for details on the expected API.

    Methods:

    make_header(name, value)
        intended to be called by code that has split a field into its name
        and its value.  The value may still contain folds.

    """

    header_factory = header.HeaderFactory()

    def __init__(self, **kw):
        if 'header_factory' not in kw:
            object.__setattr__(self, 'header_factory', header.HeaderFactory())
        super().__init__(**kw)

    def make_header(self, name, value):
        """Return a header object containing parsed data from the value.

        header_factory will be called with the name and value, and with
        this policy as the 'policy' keyword argument, so that the grammar
        is applied according to this policy's settings.

        """
        return self.header_factory(name, value, policy=self)

default = Policy()
# Make the default Policy use the class default.
del default.header_factory
strict = default.clone(raise_on_defect=True)
stored = default.clone(lenient_newlines=True)
SMTP = default
