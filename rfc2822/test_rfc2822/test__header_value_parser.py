import io
import datetime
import unittest
import contextlib
from rfc2822 import errors
from rfc2822 import _header_value_parser as parser
from rfc2822.test_rfc2822 import TestParserBase


class TestTokens(TestParserBase):

    def test_whitespace_terminal_value_is_space(self):
        fws = parser.WhiteSpaceTerminal(' \t', 'fws')
        self.assertEqual(fws, ' \t')
        self.assertEqual(fws.value, ' ')
        self.assertEqual(fws.token_type, 'fws')

    def test_value_terminal(self):
        atext = parser.ValueTerminal('abc', 'atext')
        self.assertEqual(atext.value, 'abc')
        self.assertEqual(atext.all_defects, [])

    def test_token_list_collects_defects(self):
        tl = parser.TokenList([parser.ValueTerminal('a', 'atext')])
        tl[0].defects.append(errors.ObsoleteHeaderDefect())
        tl.defects.append(errors.InvalidHeaderDefect())
        self.assertDefectsEqual(tl.all_defects, [errors.InvalidHeaderDefect,
                                                 errors.ObsoleteHeaderDefect])

    def test_pprint(self):
        atom, _ = parser.get_atom('foo ')
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            atom.pprint()
        self.assertEqual(out.getvalue(),
            "Atom/atom(\n"
            "    ValueTerminal/atext('foo')\n"
            "    CFWSList/cfws(\n"
            "        WhiteSpaceTerminal/fws(' ')\n"
            "    )\n"
            ")\n")

    def test_quote_string(self):
        self.assertEqual(parser.quote_string('a "b" \\c'), r'"a \"b\" \\c"')


class TestFoldingWhiteSpace(TestParserBase):

    def test_get_fws_plain(self):
        self._test_get_x(parser.get_fws, ' \t x', ' \t ', ' ', [], 'x')

    def test_get_fws_fold_removes_line_break(self):
        self._test_get_x(parser.get_fws, ' \r\n\tx', ' \t', ' ', [], 'x')

    def test_get_fws_several_folds(self):
        self._test_get_x(parser.get_fws, '\r\n \r\n x', '  ', ' ', [], 'x')

    def test_get_fws_leaves_bare_line_break(self):
        self._test_get_x(parser.get_fws, ' \r\nx', ' ', ' ', [], '\r\nx')

    def test_get_fws_requires_whitespace(self):
        self._test_parse_error(parser.get_fws, 'x')

    def test_lone_linefeed_fold_is_an_error_by_default(self):
        self._test_parse_error(parser.get_fws, '\n x')

    def test_lone_linefeed_fold_with_stored_policy(self):
        for fold in ('\n', '\r', '\n\r'):
            with self.subTest(fold=fold):
                self._test_get_x(parser.get_fws, fold + ' x', ' ', ' ', [],
                                 'x', policy=self.stored_policy)

    def test_unfolded_matches_single_line(self):
        folded, _ = parser.get_fws('\r\n x')
        single, _ = parser.get_fws(' x')
        self.assertEqual(str(folded), str(single))
        self.assertEqual(folded.value, single.value)


class TestComments(TestParserBase):

    def test_get_comment_simple(self):
        comment = self._test_get_x(parser.get_comment,
            '(a comment) rest', '(a comment)', ' ', [], ' rest')
        self.assertEqual(comment.content, 'a comment')
        self.assertEqual(comment.comments, ['a comment'])

    def test_get_comment_nested(self):
        comment = self._test_get_x(parser.get_comment,
            '(outer (inner) still-outer)', '(outer (inner) still-outer)',
            ' ', [], '')
        self.assertEqual(comment.content, 'outer (inner) still-outer')
        self.assertEqual(comment[2].token_type, 'comment')
        self.assertEqual(comment[2].content, 'inner')

    def test_get_comment_quoted_parens(self):
        comment = self._test_get_x(parser.get_comment,
            r'(a \) b)x', r'(a \) b)', ' ', [], 'x')
        self.assertEqual(comment.content, 'a ) b')

    def test_get_comment_folded(self):
        comment = self._test_get_x(parser.get_comment,
            '(a\r\n b)', '(a b)', ' ', [], '')
        self.assertEqual(comment.content, 'a b')

    def test_get_comment_empty(self):
        comment = self._test_get_x(parser.get_comment, '()', '()', ' ', [], '')
        self.assertEqual(comment.content, '')

    def test_get_comment_unterminated(self):
        with self.assertRaisesRegex(errors.UnexpectedEndError,
                                    "expected closing '\\)'"):
            parser.get_comment('(abc')

    def test_get_comment_unterminated_nested(self):
        with self.assertRaises(errors.UnexpectedEndError):
            parser.get_comment('(abc (def)')

    def test_get_comment_bare_line_break(self):
        self._test_parse_error(parser.get_comment, '(a\nb)')

    def test_get_comment_depth_limit(self):
        shallow = self.policy.clone(max_comment_depth=2)
        parser.get_comment('(())', shallow)
        self._test_parse_error(parser.get_comment, '((()))', shallow)

    def test_get_comment_default_depth_limit(self):
        parser.get_comment('('*64 + ')'*64)
        with self.assertRaisesRegex(errors.HeaderParseError, 'nested'):
            parser.get_comment('('*1000 + ')'*1000)

    def test_get_cfws(self):
        cfws = self._test_get_x(parser.get_cfws,
            ' (one) (two)\r\n x', ' (one) (two) ', ' ', [], 'x')
        self.assertEqual(cfws.comments, ['one', 'two'])

    def test_get_cfws_requires_something(self):
        self._test_parse_error(parser.get_cfws, 'x')


class TestQuotedString(TestParserBase):

    def test_get_bare_quoted_string(self):
        bqs = self._test_get_x(parser.get_bare_quoted_string,
            '"bob smith" x', '"bob smith"', 'bob smith', [], ' x')
        self.assertEqual(bqs.token_type, 'bare-quoted-string')

    def test_get_quoted_string_with_cfws(self):
        qs = self._test_get_x(parser.get_quoted_string,
            ' (c) "bob smith" x', ' (c) "bob smith" ', ' bob smith ', [], 'x')
        self.assertEqual(qs.content, 'bob smith')

    def test_get_quoted_string_quoted_pairs(self):
        qs = self._test_get_x(parser.get_quoted_string,
            r'"a\"b\\c"', r'"a\"b\\c"', r'a"b\c', [], '')
        self.assertEqual(qs.content, r'a"b\c')

    def test_get_quoted_string_unneeded_quoted_pair(self):
        qs, _ = parser.get_quoted_string(r'"\a"')
        self.assertEqual(qs.content, 'a')
        self.assertEqual(str(qs), '"a"')

    def test_get_quoted_string_folded(self):
        qs, _ = parser.get_quoted_string('"a\r\n b"')
        self.assertEqual(qs.content, 'a b')

    def test_get_quoted_string_empty(self):
        qs, rest = parser.get_quoted_string('""x')
        self.assertEqual(qs.content, '')
        self.assertEqual(rest, 'x')

    def test_get_quoted_string_unterminated(self):
        with self.assertRaisesRegex(errors.UnexpectedEndError,
                                    "expected closing '\"'"):
            parser.get_quoted_string('"abc')

    def test_get_quoted_string_needs_quote(self):
        self._test_parse_error(parser.get_quoted_string, 'abc')

    def test_get_quoted_string_non_printable(self):
        qs, _ = parser.get_quoted_string('"a\x01b"')
        self.assertDefectsEqual(qs.all_defects, [errors.NonPrintableDefect])

    def test_round_trip(self):
        for text in ('plain', 'he said "hi"', 'back\\slash', 'a (b) c'):
            with self.subTest(text=text):
                qs, rest = parser.get_quoted_string(parser.quote_string(text))
                self.assertEqual(qs.content, text)
                self.assertEqual(rest, '')


class TestAtoms(TestParserBase):

    def test_get_atom(self):
        self._test_get_x(parser.get_atom,
            ' (c) foo (d) bar', ' (c) foo (d) ', ' foo ', [], 'bar')

    def test_get_atom_stops_at_special(self):
        self._test_get_x(parser.get_atom, 'foo@bar', 'foo', 'foo', [], '@bar')

    def test_get_atom_fails_on_special(self):
        self._test_parse_error(parser.get_atom, '@foo')

    def test_get_dot_atom(self):
        self._test_get_x(parser.get_dot_atom,
            ' example.com (x) rest', ' example.com (x) ', ' example.com ',
            [], 'rest')

    def test_get_dot_atom_text_double_dot(self):
        self._test_parse_error(parser.get_dot_atom_text, 'a..b')

    def test_get_dot_atom_text_trailing_dot(self):
        self._test_parse_error(parser.get_dot_atom_text, 'a.')

    def test_get_dot_atom_text_leading_dot(self):
        self._test_parse_error(parser.get_dot_atom_text, '.a')

    def test_get_word_atom_or_quoted_string(self):
        word, _ = parser.get_word('foo bar')
        self.assertEqual(word.token_type, 'atom')
        word, _ = parser.get_word(' "foo" bar')
        self.assertEqual(word.token_type, 'quoted-string')
        self.assertEqual(str(word), ' "foo" ')

    def test_get_word_at_end(self):
        with self.assertRaises(errors.UnexpectedEndError):
            parser.get_word(' ')

    def test_get_phrase(self):
        self._test_get_x(parser.get_phrase,
            'Mary "the" Smith <x>', 'Mary "the" Smith ', 'Mary the Smith ',
            [], '<x>')

    def test_get_phrase_obsolete_period(self):
        self._test_get_x(parser.get_phrase,
            'John Q. Public <x>', 'John Q. Public ', 'John Q. Public ',
            [errors.ObsoleteHeaderDefect], '<x>')

    def test_get_phrase_obsolete_period_strict_only_records(self):
        # Alternatives that are later abandoned must not raise.
        self._test_get_x(parser.get_phrase,
            'John Q. Public <x>', 'John Q. Public ', 'John Q. Public ',
            [errors.ObsoleteHeaderDefect], '<x>', self.strict_policy)

    def test_get_phrase_stops_at_bare_line_break(self):
        phrase, rest = parser.get_phrase('John\r\nSmith')
        self.assertEqual(str(phrase), 'John')
        self.assertEqual(rest, '\r\nSmith')


class TestAddresses(TestParserBase):

    def test_get_addr_spec(self):
        addr_spec = self._test_get_x(parser.get_addr_spec,
            'dinsdale@example.com', 'dinsdale@example.com',
            'dinsdale@example.com', [], '')
        self.assertEqual(addr_spec.local_part, 'dinsdale')
        self.assertEqual(addr_spec.domain, 'example.com')
        self.assertEqual(addr_spec.addr_spec, 'dinsdale@example.com')

    def test_get_addr_spec_quoted_local_part(self):
        addr_spec, _ = parser.get_addr_spec('"john doe"@example.com')
        self.assertEqual(addr_spec.local_part, 'john doe')
        self.assertEqual(addr_spec.addr_spec, '"john doe"@example.com')

    def test_get_addr_spec_domain_literal(self):
        addr_spec, _ = parser.get_addr_spec('jdoe@[192.168.0.1]')
        self.assertEqual(addr_spec.domain, '[192.168.0.1]')
        self.assertEqual(addr_spec[2][0].ip, '192.168.0.1')

    def test_get_addr_spec_with_comments(self):
        addr_spec, rest = parser.get_addr_spec(
            'pete(his account)@silly.test(his host)')
        self.assertEqual(addr_spec.local_part, 'pete')
        self.assertEqual(addr_spec.domain, 'silly.test')
        self.assertEqual(rest, '')

    def test_get_addr_spec_requires_at(self):
        self._test_parse_error(parser.get_addr_spec, 'dinsdale')

    def test_get_addr_spec_requires_domain(self):
        with self.assertRaises(errors.UnexpectedEndError):
            parser.get_addr_spec('dinsdale@')

    def test_get_domain_literal_unterminated(self):
        with self.assertRaises(errors.UnexpectedEndError):
            parser.get_domain_literal('[127.0.0.1')

    def test_get_angle_addr(self):
        angle_addr, rest = parser.get_angle_addr(' <mary@example.net> x')
        self.assertEqual(angle_addr.addr_spec, 'mary@example.net')
        self.assertIsNone(angle_addr.route)
        self.assertEqual(rest, 'x')

    def test_get_angle_addr_missing_close(self):
        self._test_parse_error(parser.get_angle_addr, '<mary@example.net')

    def test_get_angle_addr_obs_route(self):
        angle_addr, rest = parser.get_angle_addr(
            '<@a.test,@b.test:joe@c.test>')
        self.assertEqual(angle_addr.route, ['a.test', 'b.test'])
        self.assertEqual(angle_addr.addr_spec, 'joe@c.test')
        self.assertDefectsEqual(angle_addr.all_defects,
                                [errors.ObsoleteHeaderDefect])
        self.assertEqual(rest, '')

    def test_get_obs_route_needs_colon(self):
        self._test_parse_error(parser.get_obs_route, '@a.test,@b.test')

    def test_get_mailbox_name_addr(self):
        mailbox, rest = parser.get_mailbox('Mary Smith <mary@example.net>')
        self.assertEqual(mailbox.display_name, 'Mary Smith')
        self.assertEqual(mailbox.local_part, 'mary')
        self.assertEqual(mailbox.domain, 'example.net')
        self.assertEqual(rest, '')

    def test_get_mailbox_addr_spec(self):
        mailbox, rest = parser.get_mailbox('mary@example.net')
        self.assertIsNone(mailbox.display_name)
        self.assertEqual(mailbox.local_part, 'mary')
        self.assertEqual(mailbox.domain, 'example.net')
        self.assertEqual(rest, '')

    def test_get_mailbox_angle_addr_only(self):
        mailbox, _ = parser.get_mailbox('<mary@example.net>')
        self.assertIsNone(mailbox.display_name)
        self.assertEqual(mailbox.addr_spec, 'mary@example.net')

    def test_get_mailbox_quoted_display_name(self):
        mailbox, _ = parser.get_mailbox('"Smith, Mary" <mary@example.net>')
        self.assertEqual(mailbox.display_name, 'Smith, Mary')

    def test_get_mailbox_display_name_ending_in_period(self):
        mailbox, _ = parser.get_mailbox('John Q.<jq@example.net>')
        self.assertEqual(mailbox.display_name, 'John Q.')
        self.assertDefectsEqual(mailbox.all_defects,
                                [errors.ObsoleteHeaderDefect])

    def test_get_mailbox_failure(self):
        self._test_parse_error(parser.get_mailbox, 'Mary Smith')

    def test_get_group(self):
        group, rest = parser.get_group(
            'A Group:Chris Jones <c@a.test>,joe@where.test;')
        self.assertEqual(group.display_name, 'A Group')
        self.assertEqual([mb.addr_spec for mb in group.mailboxes],
                         ['c@a.test', 'joe@where.test'])
        self.assertEqual(group.mailboxes[0].display_name, 'Chris Jones')
        self.assertEqual(rest, '')

    def test_get_group_empty(self):
        group, rest = parser.get_group('Undisclosed recipients:;')
        self.assertEqual(group.display_name, 'Undisclosed recipients')
        self.assertEqual(group.mailboxes, [])
        self.assertEqual(rest, '')

    def test_get_group_cfws_only(self):
        group, rest = parser.get_group('Undisclosed: (none) ;')
        self.assertEqual(group.mailboxes, [])
        self.assertEqual(rest, '')

    def test_get_group_missing_terminator(self):
        self._test_parse_error(parser.get_group, 'A Group:joe@where.test')

    def test_get_address_list(self):
        address_list, rest = parser.get_address_list(
            'Mary Smith <mary@x.test>, jdoe@example.org, '
            'Who? <one@y.test>')
        self.assertEqual(len(address_list.addresses), 3)
        self.assertEqual([mb.local_part for mb in address_list.mailboxes],
                         ['mary', 'jdoe', 'one'])
        self.assertEqual(address_list.mailboxes[2].display_name, 'Who?')
        self.assertEqual(rest, '')

    def test_get_address_list_group_and_mailbox(self):
        address_list, rest = parser.get_address_list(
            'A Group:Chris Jones <c@a.test>,joe@where.test;, '
            'Mary <mary@x.test>')
        self.assertEqual(len(address_list.addresses), 2)
        self.assertEqual(address_list.addresses[0][0].token_type, 'group')
        self.assertEqual(address_list.addresses[0].display_name, 'A Group')
        self.assertEqual(len(address_list.mailboxes), 3)
        self.assertEqual(rest, '')

    def test_get_address_list_bad_element_fails_list(self):
        self._test_parse_error(parser.get_address_list,
                               'mary@x.test, not an address, joe@y.test')

    def test_get_address_list_trailing_comma(self):
        self._test_parse_error(parser.get_address_list, 'mary@x.test,')

    def test_get_address_list_folded(self):
        address_list, rest = parser.get_address_list(
            'Mary Smith\r\n <mary@x.test>,\r\n\tjdoe@example.org')
        self.assertEqual(address_list.mailboxes[0].display_name,
                         'Mary Smith')
        self.assertEqual(address_list.mailboxes[1].addr_spec,
                         'jdoe@example.org')
        self.assertEqual(rest, '')


class TestMessageIds(TestParserBase):

    def test_get_msg_id(self):
        msg_id, rest = parser.get_msg_id('<1234@local.machine.example>')
        self.assertEqual(msg_id.message_id, '<1234@local.machine.example>')
        self.assertEqual(rest, '')

    def test_get_msg_id_with_cfws(self):
        msg_id, rest = parser.get_msg_id(' (id) <a.b@c.d> x')
        self.assertEqual(msg_id.message_id, '<a.b@c.d>')
        self.assertEqual(rest, 'x')

    def test_get_msg_id_needs_angle_brackets(self):
        self._test_parse_error(parser.get_msg_id, '1234@local.machine')

    def test_get_msg_id_needs_at(self):
        self._test_parse_error(parser.get_msg_id, '<1234>')

    def test_get_msg_id_list(self):
        id_list, rest = parser.get_msg_id_list(
            '<a@b.c>\r\n <d@e.f> <g@h.i>')
        self.assertEqual(id_list.message_ids,
                         ['<a@b.c>', '<d@e.f>', '<g@h.i>'])
        self.assertEqual(rest, '')


class TestUnstructured(TestParserBase):

    def test_get_unstructured(self):
        unstructured = parser.get_unstructured('This is a\r\n test')
        self.assertEqual(str(unstructured), 'This is a test')
        self.assertEqual(unstructured.value, 'This is a test')
        self.assertEqual(unstructured.all_defects, [])

    def test_get_unstructured_empty(self):
        self.assertEqual(str(parser.get_unstructured('')), '')

    def test_get_unstructured_bare_line_break(self):
        unstructured = parser.get_unstructured('a\nb')
        self.assertEqual(str(unstructured), 'a\nb')
        self.assertDefectsEqual(unstructured.all_defects,
                                [errors.NonPrintableDefect])

    def test_get_unstructured_stored_policy_folds(self):
        unstructured = parser.get_unstructured('a\n b', self.stored_policy)
        self.assertEqual(str(unstructured), 'a b')
        self.assertEqual(unstructured.all_defects, [])

    def test_get_unstructured_non_printable(self):
        unstructured = parser.get_unstructured('a\x01b c')
        self.assertDefectsEqual(unstructured.all_defects,
                                [errors.NonPrintableDefect])
        self.assertEqual(unstructured.all_defects[0].non_printables, ['\x01'])


class TestDateTime(TestParserBase):

    def test_full_date_time(self):
        dt, rest = parser.get_date_time('Fri, 21 Nov 1997 09:55:06 -0600')
        self.assertEqual(rest, '')
        self.assertEqual(dt.day_of_week, 'Fri')
        self.assertEqual((dt.day, dt.month, dt.year), (21, 11, 1997))
        self.assertEqual((dt.hour, dt.minute, dt.second), (9, 55, 6))
        self.assertEqual(dt.zone_offset, -360)
        self.assertFalse(dt.zone_unknown)
        self.assertEqual(dt.all_defects, [])

    def test_datetime_property(self):
        dt, _ = parser.get_date_time('Fri, 21 Nov 1997 09:55:06 -0600')
        tz = datetime.timezone(datetime.timedelta(hours=-6))
        self.assertEqual(dt.datetime,
                         datetime.datetime(1997, 11, 21, 9, 55, 6, tzinfo=tz))
        self.assertEqual(dt.datetime.weekday(), 4)

    def test_no_day_of_week_no_seconds(self):
        dt, rest = parser.get_date_time('1 Jan 2000 00:00 +0130')
        self.assertIsNone(dt.day_of_week)
        self.assertIsNone(dt.second)
        self.assertEqual(dt.zone_offset, 90)
        self.assertEqual(dt.datetime.second, 0)
        self.assertEqual(rest, '')

    def test_two_digit_years(self):
        for text, year in (('78', 1978), ('04', 2004), ('49', 2049),
                           ('50', 1950)):
            with self.subTest(text=text):
                dt, _ = parser.get_date_time(
                    'Fri, 21 Nov {} 09:55:06 -0600'.format(text))
                self.assertEqual(dt.year, year)
                self.assertDefectsEqual(dt.all_defects,
                                        [errors.ObsoleteHeaderDefect])

    def test_three_digit_year(self):
        dt, _ = parser.get_date_time('21 Nov 101 09:55:06 -0600')
        self.assertEqual(dt.year, 2001)

    def test_obsolete_year_strict_only_records(self):
        dt, _ = parser.get_date_time('21 Nov 97 09:55:06 -0600',
                                     self.strict_policy)
        self.assertDefectsEqual(dt.all_defects,
                                [errors.ObsoleteHeaderDefect])

    def test_case_insensitive_names(self):
        dt, _ = parser.get_date_time('fri, 21 nOV 1997 09:55:06 gmt')
        self.assertEqual(dt.day_of_week, 'Fri')
        self.assertEqual(dt.month, 11)
        self.assertEqual(dt.zone_offset, 0)

    def test_named_zones(self):
        for zone, offset in (('UT', 0), ('GMT', 0), ('EST', -300),
                             ('EDT', -240), ('CST', -360), ('CDT', -300),
                             ('MST', -420), ('MDT', -360), ('PST', -480),
                             ('PDT', -420), ('Z', 0)):
            with self.subTest(zone=zone):
                dt, rest = parser.get_date_time(
                    '21 Nov 1997 09:55:06 ' + zone)
                self.assertEqual(dt.zone_offset, offset)
                self.assertFalse(dt.zone_unknown)
                self.assertDefectsEqual(dt.all_defects,
                                        [errors.ObsoleteHeaderDefect])
                self.assertEqual(rest, '')

    def test_military_zones_are_unknown(self):
        dt, _ = parser.get_date_time('21 Nov 1997 09:55:06 A')
        self.assertTrue(dt.zone_unknown)
        self.assertEqual(dt.zone_offset, 0)
        self.assertIsNone(dt.datetime.tzinfo)

    def test_zone_j_is_invalid(self):
        self._test_parse_error(parser.get_date_time,
                               '21 Nov 1997 09:55:06 J')

    def test_unknown_zone_name(self):
        self._test_parse_error(parser.get_date_time,
                               '21 Nov 1997 09:55:06 UTC')

    def test_minus_zero_zone_is_unknown(self):
        dt, _ = parser.get_date_time('21 Nov 1997 09:55:06 -0000')
        self.assertTrue(dt.zone_unknown)
        self.assertIsNone(dt.datetime.tzinfo)

    def test_plus_zero_zone_is_utc(self):
        dt, _ = parser.get_date_time('21 Nov 1997 09:55:06 +0000')
        self.assertFalse(dt.zone_unknown)
        self.assertEqual(dt.datetime.utcoffset(), datetime.timedelta(0))

    def test_trailing_comment(self):
        dt, rest = parser.get_date_time(
            'Fri, 21 Nov 1997 09:55:06 -0600 (CST)')
        self.assertEqual(dt.zone_offset, -360)
        self.assertEqual(rest, '')

    def test_folded(self):
        dt, rest = parser.get_date_time(
            'Fri, 21 Nov 1997\r\n 09:55:06 -0600')
        self.assertEqual(dt.hour, 9)
        self.assertEqual(rest, '')

    def test_obsolete_whitespace_in_time(self):
        dt, rest = parser.get_date_time('21 Nov 1997 09 : 55 : 06 -0600')
        self.assertEqual((dt.hour, dt.minute, dt.second), (9, 55, 6))
        self.assertEqual(rest, '')

    def test_missing_zone(self):
        self._test_parse_error(parser.get_date_time, '21 Nov 1997 09:55:06')

    def test_missing_comma_after_day_of_week(self):
        self._test_parse_error(parser.get_date_time,
                               'Fri 21 Nov 1997 09:55:06 -0600')

    def test_full_day_name(self):
        self._test_parse_error(parser.get_date_time,
                               'Friday, 21 Nov 1997 09:55:06 -0600')

    def test_missing_space_before_month(self):
        self._test_parse_error(parser.get_date_time,
                               '21Nov 1997 09:55:06 -0600')

    def test_bad_month(self):
        self._test_parse_error(parser.get_date_time,
                               '21 Foo 1997 09:55:06 -0600')

    def test_short_zone(self):
        self._test_parse_error(parser.get_date_time,
                               '21 Nov 1997 09:55:06 -060')

    def test_zone_minutes_out_of_range(self):
        for zone in ('+0060', '-0099', '+1275'):
            with self.subTest(zone=zone):
                self._test_parse_error(parser.get_date_time,
                                       '21 Nov 1997 09:55:06 ' + zone)

    def test_zone_minutes_in_range(self):
        dt, _ = parser.get_date_time('21 Nov 1997 09:55:06 -0959')
        self.assertEqual(dt.zone_offset, -599)

    def test_input_ends_mid_field(self):
        for text in ('21 Nov', '21 Nov 1997 09:5', '21 Nov 1997 09:55',
                     '21 Nov 1997 09:55:06 ', '21 Nov 1997 09:55:06 -06',
                     'Fri'):
            with self.subTest(text=text):
                with self.assertRaises(errors.UnexpectedEndError):
                    parser.get_date_time(text)

    def test_bad_field_is_not_unexpected_end(self):
        with self.assertRaises(errors.HeaderParseError) as cm:
            parser.get_date_time('21 Nov 1997 09:5x -0600')
        self.assertNotIsInstance(cm.exception, errors.UnexpectedEndError)

    def test_leap_second_matches_grammar(self):
        dt, rest = parser.get_date_time('30 Jun 1997 23:59:60 +0000')
        self.assertEqual(dt.second, 60)
        with self.assertRaises(ValueError):
            dt.datetime


if __name__ == '__main__':
    unittest.main()
