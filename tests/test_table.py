import json

import pytest

from recspl.errors import GrammarConflictError, TableFormatError
from recspl.grammar import Grammar, parse_bnf
from recspl.lalr import (
    ACCEPT, ERROR, ParseTable, Reduce, Shift, build_lalr_tables, build_slr_tables, build_tables,
    compute_nullable_first_follow, decode_action, dump_table, encode_action, load_table,
)


def test_fixture_table_shape(toy_table):
    assert toy_table.n_states == 5
    assert toy_table.start_state == 0
    assert toy_table.action_for(0, "a") == Shift(2)
    assert toy_table.action_for(1, "$") is ACCEPT
    assert toy_table.action_for(4, "b") == Reduce(1)
    assert toy_table.action_for(3, "$") is ERROR
    assert toy_table.goto_for(2, "S") == 3
    assert toy_table.goto_for(3, "S") is None
    assert toy_table.expected_terminals(3) == frozenset({"b"})
    assert toy_table.expected_terminals(99) == frozenset()


def test_generated_slr_matches_fixture(toy_grammar, toy_table):
    built = build_slr_tables(toy_grammar)
    assert built.conflicts == ()
    assert built.n_states == toy_table.n_states
    assert dict(built.action) == dict(toy_table.action)
    assert dict(built.goto) == dict(toy_table.goto)


def test_lalr_lookaheads_are_narrower_than_slr(toy_grammar):
    slr = build_slr_tables(toy_grammar)
    lalr = build_lalr_tables(toy_grammar)
    assert lalr.n_states == slr.n_states
    assert lalr.action_for(0, "b") is ERROR
    assert slr.action_for(0, "b") == Reduce(2)
    assert lalr.action_for(2, "b") == Reduce(2)


def test_first_follow_toy(toy_grammar):
    ff = compute_nullable_first_follow(toy_grammar)
    assert "S" in ff.nullable
    assert ff.first["S"] == {"a"}
    assert ff.follow["S"] == {"$", "b"}


def test_first_follow_recspl(grammar):
    ff = compute_nullable_first_follow(grammar)
    assert {"GLOBVARS", "INSTRUC", "FUNCTIONS", "SUBFUNCS"} <= ff.nullable
    assert "ALGO" not in ff.nullable
    assert ff.follow["GLOBVARS"] == {"begin"}
    assert ff.follow["FUNCTIONS"] == {"$", "end"}
    assert ff.first["COMMAND"] >= {"skip", "halt", "print", "return", "if", "V", "F"}
    assert {"else", ";", "}", "$"} <= ff.follow["ALGO"]


@pytest.mark.parametrize("kind", ["slr", "lalr"])
def test_recspl_tables_are_conflict_free(kind):
    from recspl.grammar import recspl_grammar

    table = build_tables(recspl_grammar(), kind, strict=True)
    assert table.conflicts == ()
    assert table.pretty_conflicts() == "(no conflicts)"
    table.validate()


def test_unknown_kind():
    with pytest.raises(ValueError):
        build_tables(parse_bnf("S -> a"), "lr1")


def test_ambiguous_grammar_reports_conflicts():
    g = parse_bnf("E -> E + E | x")
    table = build_slr_tables(g)
    assert table.conflicts
    assert all(sym == "+" for _, sym, _ in table.conflicts)
    assert "shift / reduce" in table.pretty_conflicts()
    with pytest.raises(GrammarConflictError):
        build_lalr_tables(g, strict=True)


def test_reduce_reduce_prefers_lower_rule():
    g = Grammar.from_rules("S", [("S", ["A"]), ("S", ["B"]), ("A", ["x"]), ("B", ["x"])])
    table = build_slr_tables(g)
    assert any(kinds == ("reduce", "reduce") for _, _, kinds in table.conflicts)
    s = table.action_for(0, "x").target
    assert table.action_for(s, "$") == Reduce(3)


@pytest.mark.parametrize("text, action", [("s7", Shift(7)), ("r3", Reduce(3)), ("acc", ACCEPT)])
def test_action_codec(text, action):
    assert decode_action(text) == action
    assert encode_action(action) == text


@pytest.mark.parametrize("text", ["x3", "s", "r-1", "", "accept", "s²", "r٣"])
def test_bad_action_text(text):
    with pytest.raises(TableFormatError):
        decode_action(text)


def test_artifact_round_trip(tmp_path, recspl_lalr):
    out = tmp_path / "nested" / "recspl.table.json"
    dump_table(recspl_lalr, out)
    loaded = load_table(out)
    assert loaded.n_states == recspl_lalr.n_states
    assert dict(loaded.action) == dict(recspl_lalr.action)
    assert dict(loaded.goto) == dict(recspl_lalr.goto)
    assert loaded.grammar.productions == recspl_lalr.grammar.productions
    assert json.loads(out.read_text(encoding="utf-8"))["format"] == "recspl-table/1"


def _mutate(d, path, value):
    cur = d
    for k in path[:-1]:
        cur = cur[k]
    cur[path[-1]] = value


@pytest.mark.parametrize(
    "path, value",
    [
        (("format",), "recspl-table/0"),
        (("action", "0", "$"), "s1"),         # '$' 위 shift
        (("action", "0", "a"), "s9"),         # 없는 상태로 shift
        (("action", "4", "b"), "r7"),         # 없는 규칙
        (("action", "4", "b"), "r0"),         # 증강 규칙으로 reduce
        (("action", "1", "$"), "r1"),         # accept 없음
        (("action", "0", "S"), "s1"),         # 비단말 키
        (("goto", "0", "S"), 12),
        (("goto", "0", "b"), 1),
        (("n_states",), "five"),
        (("start_state",), 5),
        (("productions",), [{"id": 1, "lhs": "S", "rhs": []}]),
    ],
)
def test_malformed_artifact_rejected(toy_dict, path, value):
    _mutate(toy_dict, path, value)
    with pytest.raises(TableFormatError):
        ParseTable.from_dict(toy_dict)


def test_missing_key_rejected(toy_dict):
    del toy_dict["action"]
    with pytest.raises(TableFormatError):
        ParseTable.from_dict(toy_dict)


def test_load_table_rejects_non_json(tmp_path):
    p = tmp_path / "t.json"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(TableFormatError):
        load_table(p)
    p.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(TableFormatError):
        load_table(p)


def test_table_is_read_only(toy_table):
    with pytest.raises(TypeError):
        toy_table.action[(0, "a")] = Shift(3)
