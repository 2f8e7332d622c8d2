import unittest
from rfc2822 import errors
from rfc2822 import policy as _policy


# Base test class
class TestParserBase(unittest.TestCase):

    maxDiff = None
    # We put these here so we can see what happens to the tests if
    # we change some defaults.
    policy = _policy.default
    strict_policy = _policy.strict
    stored_policy = _policy.stored

    def assertDefectsEqual(self, actual, expected):
        self.assertEqual(len(actual), len(expected), actual)
        for i in range(len(actual)):
            self.assertIsInstance(actual[i], expected[i],
                                    'item {}'.format(i))

    def _test_get_x(self, method, source, string, value, defects,
                          remainder, policy=None):
        """Apply method to source and check the token and remainder.

        'string' is the expected str() of the token and 'value' its
        expected semantic value.
        """
        if policy is None:
            policy = self.policy
        tl, rest = method(source, policy)
        self.assertEqual(str(tl), string)
        self.assertEqual(tl.value, value)
        self.assertDefectsEqual(tl.all_defects, defects)
        self.assertEqual(rest, remainder)
        return tl

    def _test_parse_error(self, method, source, policy=None):
        if policy is None:
            policy = self.policy
        with self.assertRaises(errors.HeaderParseError):
            method(source, policy)
