"""Tests for the query grammar and AST lowering (keyvault.query.parser / ast)."""

import pytest

from keyvault.query import (
    And,
    FieldFilter,
    Not,
    Or,
    Phrase,
    QuerySyntaxError,
    Term,
    build_ast,
    dump,
    parse,
    parse_query,
)
from keyvault.query.parser import MAX_NESTING


def tree(text):
    return dump(parse_query(text))


# ─── Empty Input ─────────────────────────────────────────────────────


class TestEmpty:
    @pytest.mark.parametrize("text", ["", "   ", "\t\r\n"])
    def test_empty_parses_to_none(self, text):
        assert parse(text) is None
        assert parse_query(text) is None


# ─── Primaries ───────────────────────────────────────────────────────


class TestPrimaries:
    def test_term(self):
        assert parse_query("token") == Term("token")

    def test_phrase(self):
        assert parse_query('"hello world"') == Phrase("hello world")

    def test_wildcard_term(self):
        node = parse_query("err*")
        assert node == Term("err*")
        assert node.is_prefix
        assert node.pattern == "err"

    def test_plain_term_is_not_prefix(self):
        assert not Term("err").is_prefix

    def test_field_filter(self):
        assert parse_query("status:open") == FieldFilter("status", Term("open"))

    def test_field_filter_quoted_value_is_phrase(self):
        assert parse_query('status:"in progress"') == FieldFilter("status", Phrase("in progress"))

    def test_field_filter_quoted_key(self):
        node = parse_query('"first name":"last name"')
        assert node == FieldFilter("first name", Phrase("last name"))

    def test_field_filter_escaped_value(self):
        node = parse_query(r'message:"{\"ok\": true}"')
        assert node == FieldFilter("message", Phrase('{"ok": true}'))

    def test_field_filter_negative_value(self):
        assert parse_query("delta:-5") == FieldFilter("delta", Term("-5"))

    def test_reserved_fields_parse_like_any_field(self):
        assert parse_query("secret_key:db*") == FieldFilter("secret_key", Term("db*"))

    def test_grouping_is_transparent(self):
        assert parse_query("((token))") == Term("token")


# ─── Operators & Precedence ──────────────────────────────────────────


class TestPrecedence:
    def test_and_binds_tighter_than_or(self):
        assert tree("a OR b AND c") == "(OR a (AND b c))"
        assert parse_query("a OR b AND c") == parse_query("a OR (b AND c)")

    def test_not_binds_to_next_primary(self):
        assert tree("-a b") == "(AND (NOT a) b)"
        assert parse_query("-a b") == And(Not(Term("a")), Term("b"))

    def test_implicit_and_equals_explicit(self):
        assert parse_query("a b") == parse_query("a AND b")

    def test_and_is_left_associative(self):
        assert parse_query("a b c") == And(And(Term("a"), Term("b")), Term("c"))

    def test_or_is_left_associative(self):
        assert parse_query("a OR b OR c") == Or(Or(Term("a"), Term("b")), Term("c"))

    def test_mixed_explicit_and_implicit_and(self):
        assert tree("foo AND bar baz:qux") == "(AND (AND foo bar) baz:qux)"

    def test_lowercase_operators_are_terms(self):
        assert tree("error and warning") == "(AND (AND error and) warning)"
        assert tree("a or b") == "(AND (AND a or) b)"

    def test_grouping_overrides_precedence(self):
        assert tree("(a OR b) c") == "(AND (OR a b) c)"

    def test_grouped_or_with_negation(self):
        assert tree("(error OR warning) -debug") == "(AND (OR error warning) (NOT debug))"

    def test_negated_group(self):
        assert tree("-(a:b OR c:d)") == "(NOT (OR a:b c:d))"
        assert tree("-(a:b AND c:d)") == "(NOT (AND a:b c:d))"

    def test_negated_field_filter(self):
        assert parse_query("-something:wild") == Not(FieldFilter("something", Term("wild")))

    def test_mixed_not_and_or(self):
        assert tree("-a:b AND (c:d OR -e:f)") == "(AND (NOT a:b) (OR c:d (NOT e:f)))"

    def test_nested_grouping(self):
        assert tree("(a:b OR (c:d AND e:f))") == "(OR a:b (AND c:d e:f))"

    def test_double_nested_grouping_with_or(self):
        text = "(foo:bar OR baz:qux) AND (alpha:beta OR gamma:delta) OR (i:j AND k:l)"
        assert tree(text) == (
            "(OR (AND (OR foo:bar baz:qux) (OR alpha:beta gamma:delta)) (AND i:j k:l))"
        )

    def test_adjacent_groups_without_space(self):
        assert tree("(a)(b)") == "(AND a b)"

    def test_word_then_phrase_without_space(self):
        assert parse_query('a"b c"') == And(Term("a"), Phrase("b c"))

    def test_multiple_field_filters(self):
        assert tree("status:open priority:high") == "(AND status:open priority:high)"

    def test_whitespace_after_negation(self):
        assert parse_query("- debug") == Not(Term("debug"))


# ─── Parse Tree ──────────────────────────────────────────────────────


class TestParseTree:
    def test_rules(self):
        t = parse("a OR -b c:d")
        assert t.rule == "or_expr"
        left, right = t.children
        assert left.rule == "term"
        assert right.rule == "and_expr"
        assert [c.rule for c in right.children] == ["not_expr", "field_filter"]
        assert [c.rule for c in right.children[1].children] == ["key", "value"]

    def test_grouped_node(self):
        t = parse("(a)")
        assert t.rule == "grouped"
        assert t.pos == 0
        assert t.children[0].rule == "term"

    def test_build_is_deterministic(self):
        t = parse("(error OR warning) -debug status:open")
        assert build_ast(t) == build_ast(t)


# ─── Syntax Errors ───────────────────────────────────────────────────


class TestSyntaxErrors:
    @pytest.mark.parametrize(
        "text, position",
        [
            ("status:", 7),
            ("status: open", 7),
            ("(error", 6),
            ('"unterminated', 0),
            (":b", 0),
            ("(", 1),
            (")", 0),
            ("a)", 1),
            ("a AND", 5),
            ("a OR", 4),
            ("a:b OR AND c:d", 7),
            ("AND", 0),
            ("-", 1),
            ("a b:", 4),
            ("status :open", 7),
            ("a @b", 2),
        ],
    )
    def test_position(self, text, position):
        with pytest.raises(QuerySyntaxError) as exc:
            parse_query(text)
        assert exc.value.position == position
        assert exc.value.query == text

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            parse_query("(")

    def test_message_mentions_position(self):
        with pytest.raises(QuerySyntaxError, match="position 7"):
            parse_query("status:")

    def test_missing_value_names_field(self):
        with pytest.raises(QuerySyntaxError, match="'status' is missing a value"):
            parse_query("status:")

    def test_nesting_limit(self):
        text = "(" * 300 + "a" + ")" * 300
        with pytest.raises(QuerySyntaxError, match="nested too deeply") as exc:
            parse_query(text)
        assert exc.value.position == MAX_NESTING

    def test_nesting_up_to_limit(self):
        text = "(" * MAX_NESTING + "a" + ")" * MAX_NESTING
        assert parse_query(text) == Term("a")

    def test_negated_nesting_up_to_limit(self):
        text = "-(" * MAX_NESTING + "a" + ")" * MAX_NESTING
        assert dump(parse_query(text)).count("NOT") == MAX_NESTING

    def test_unmatched_paren_reports_opening(self):
        with pytest.raises(QuerySyntaxError, match=r"close '\(' at position 2"):
            parse_query("a (b OR c")
