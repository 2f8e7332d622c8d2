"""Policy framework for the rfc2822 package.

Allows fine grained feature control of how the grammar engine parses text.
The header level policy, which adds the header factory, lives in
rfc2822.policy; the parser itself only needs what is defined here.
"""

__all__ = [
    'Policy',
    'default',
    ]


class _PolicyBase:

    """Policy Object basic framework.

    This class is useless unless subclassed.  A subclass should define
    class attributes with defaults for any values that are to be
    managed by the Policy object.  The constructor will then allow
    non-default values to be set for these attributes at instance
    creation time.  The clone method takes these same attributes as
    keyword arguments and returns a new instance identical to the
    called instance except for those values changed by the keyword
    arguments.  Instances may be added, yielding new instances with any
    non-default values from the right hand operand overriding those in
    the left hand operand.  That is,

        A + B == A.clone(<non-default values of B>)

    The repr of an instance can be used to reconstruct the object
    if and only if the repr of the values can be used to reconstruct
    those values.

    """

    def __init__(self, **kw):
        """Create new Policy, possibly overriding some defaults.

        See class docstring for a list of overridable attributes.

        """
        for name, value in kw.items():
            if hasattr(self, name):
                object.__setattr__(self, name, value)
            else:
                raise TypeError(
                    "{!r} is an invalid keyword argument for {}".format(
                        name, self.__class__.__name__))

    def __repr__(self):
        args = [ "{}={!r}".format(name, value)
                 for name, value in self.__dict__.items() ]
        return "{}({})".format(self.__class__.__name__, ', '.join(args))

    def clone(self, **kw):
        """Return a new instance with specified attributes changed.

        The new instance has the same attribute values as the current object,
        except for the changes passed in as keyword arguments.

        """
        newpolicy = self.__class__.__new__(self.__class__)
        for attr, value in self.__dict__.items():
            object.__setattr__(newpolicy, attr, value)
        for attr, value in kw.items():
            if not hasattr(self, attr):
                raise TypeError(
                    "{!r} is an invalid keyword argument for {}".format(
                        attr, self.__class__.__name__))
            object.__setattr__(newpolicy, attr, value)
        return newpolicy

    def __setattr__(self, name, value):
        if hasattr(self, name):
            msg = "{!r} object attribute {!r} is read-only"
        else:
            msg = "{!r} object has no attribute {!r}"
        raise AttributeError(msg.format(self.__class__.__name__, name))

    def __add__(self, other):
        """Non-default values from right operand override those from left.

        The object returned is a new instance of the subclass.

        """
        return self.clone(**other.__dict__)


class Policy(_PolicyBase):

    """Controls for how header text is interpreted.

    Every parser function accepts a Policy as its 'policy' argument.
    Policy objects are immutable, but a new Policy object can be created
    with only certain values changed by calling the clone method with
    keyword arguments.

    Settable attributes:

    raise_on_defect     -- If true, then defects should be raised as errors.
                           Default False.

    lenient_newlines    -- If true, a fold may begin with CR LF, LF CR, a
                           bare CR or a bare LF.  This is meant for text
                           that was stored and re-serialized, never for
                           messages received live.  Default False, which
                           accepts only CR LF.

    max_comment_depth   -- how deeply comments may nest inside each other
                           before the input is rejected.  Default 64.

    Methods:

    register_defect(obj, defect)
        defect is a Defect instance.  The default implementation appends defect
        to the objs 'defects' attribute.

    handle_defect(obj, defect)
        intended to be called by parser code that finds a defect.  If
        raise_on_defect is True, defect is raised as an error, otherwise
        register_defect is called.

    """

    raise_on_defect = False
    lenient_newlines = False
    max_comment_depth = 64

    def handle_defect(self, obj, defect):
        """Based on policy, either raise defect or call register_defect.

            handle_defect(obj, defect)

        defect should be a Defect subclass, but in any case must be an
        Exception subclass.  obj is the object on which the defect should be
        registered if it is not raised.  If the raise_on_defect is True, the
        defect is raised as an error, otherwise the object and the defect are
        passed to register_defect.

        """
        if self.raise_on_defect:
            raise defect
        self.register_defect(obj, defect)

    def register_defect(self, obj, defect):
        """Record 'defect' on 'obj'.

        Called by handle_defect if raise_on_defect is False.  This method is
        part of the Policy API so that Policy subclasses can implement custom
        defect handling.  The default implementation calls the append method
        of the defects attribute of obj.

        """
        obj.defects.append(defect)


default = Policy()
