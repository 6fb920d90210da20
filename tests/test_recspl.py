import threading

import pytest

from recspl.errors import LexError, MalformedTerminalMapping, TableLookupError
from recspl.grammar import recspl_grammar
from recspl.lalr import LRParser, parse_terminals
from recspl.lex import TOKEN_CLASSES, LexTok, RecsplLexer, tokenize
from recspl.lex.adapter import RECSPL_TERMINALS, TerminalMap, TerminalTok
from recspl.pipeline import Frontend, parse_source, recspl_table
from recspl.syntax import Internal, Leaf, leaves, node_ids, to_sexpr, walk

SMALL_PROGRAM = [
    ("main", "main"), ("num", "num"), ("V", "V_x"), (",", ","),
    ("begin", "begin"), ("V", "V_x"), ("=", "="), ("N", "5"), (";", ";"), ("end", "end"),
    ("$", ""),
]


# ---------- lexer ----------

def test_lexer_classifies_words_and_punctuation():
    toks = tokenize('main num V_x , begin V_x = -5 ; V_s = "hi there" ; end')
    assert [t.type for t in toks] == [
        "MAIN", "NUM", "VAR", "COMMA", "BEGIN", "VAR", "ASSIGN", "NUMBER", "SEMICOLON",
        "VAR", "ASSIGN", "STRING", "SEMICOLON", "END",
    ]
    assert toks[7].text == "-5"
    assert toks[11].text == '"hi there"'


def test_lexer_positions():
    toks = tokenize("main\n  num V_ab1 ,")
    assert [(t.text, t.line, t.col, t.pos) for t in toks] == [
        ("main", 1, 1, 0), ("num", 2, 3, 7), ("V_ab1", 2, 7, 11), (",", 2, 13, 17),
    ]


def test_lexer_peek_and_next():
    lx = RecsplLexer("F_go ( 1")
    assert lx.peek() == lx.peek()
    assert lx.next().type == "FUNC"
    assert [t.type for t in lx] == ["LPAREN", "NUMBER"]
    assert lx.next() is None


@pytest.mark.parametrize("src", ["mainx", "V_X", "F_", "x", "V_x @", "Begin"])
def test_lexer_rejects(src):
    with pytest.raises(LexError):
        tokenize(src)


def test_lexer_error_position():
    with pytest.raises(LexError) as ei:
        tokenize("main\n num $")
    assert (ei.value.line, ei.value.col) == (2, 6)


# ---------- adapter ----------

def test_recspl_mapping_is_total_and_grammar_aligned():
    g = recspl_grammar()
    assert set(RECSPL_TERMINALS) == set(TOKEN_CLASSES)
    assert all(g.is_terminal(t) for t in RECSPL_TERMINALS.values())
    assert len(TerminalMap.for_recspl(g)) == len(TOKEN_CLASSES)


def test_adapt_appends_single_eof():
    adapter = TerminalMap.for_recspl()
    out = adapter.adapt(tokenize("V_x < input"))
    assert [(t.terminal, t.lexeme) for t in out] == [("V", "V_x"), ("<", "<"), ("input", "input"), ("$", "")]
    assert out[-1].pos == len("V_x < input")
    assert adapter.adapt([]) == [TerminalTok("$", "")]


def test_unmapped_class_fails_before_parsing(recspl_lalr):
    adapter = TerminalMap({"VAR": "V"})
    steps = []
    toks = [LexTok("VAR", "V_x", 1, 1, 0), LexTok("BOGUS", "?", 1, 5, 4)]
    with pytest.raises(MalformedTerminalMapping) as ei:
        LRParser(recspl_lalr).parse_tokens(toks, adapter, trace=steps.append)
    assert ei.value.token_class == "BOGUS"
    assert (ei.value.line, ei.value.col) == (1, 5)
    assert steps == []
    assert "BOGUS" in str(ei.value)


@pytest.mark.parametrize(
    "mapping, kwargs",
    [
        ({"VAR": "$"}, {}),
        ({"VAR": "VAR"}, {"grammar": recspl_grammar()}),
        ({"VAR": "V"}, {"token_classes": {"VAR", "FUNC"}}),
    ],
)
def test_bad_mapping_rejected_at_construction(mapping, kwargs):
    with pytest.raises(MalformedTerminalMapping):
        TerminalMap(mapping, **kwargs)


# ---------- RecSPL parsing ----------

@pytest.mark.parametrize("kind", ["slr", "lalr"])
def test_small_program_tree(kind, recspl_slr, recspl_lalr):
    table = recspl_slr if kind == "slr" else recspl_lalr
    steps = []
    root = parse_terminals(SMALL_PROGRAM, table, trace=steps.append)

    assert isinstance(root, Internal)
    assert root.nonterminal == "PROG"
    assert [c.label for c in root.children] == ["main", "GLOBVARS", "ALGO", "FUNCTIONS"]
    assert root.child("FUNCTIONS").children == ()

    glob = root.child("GLOBVARS")
    assert [c.label for c in glob.children] == ["VTYP", "VNAME", ",", "GLOBVARS"]
    assert glob.child("VNAME").children == (Leaf(0, "V", "V_x"),)

    assign = root.child("ALGO").child("INSTRUC").child("COMMAND").child("ASSIGN")
    assert [c.label for c in assign.children] == ["VNAME", "=", "TERM"]
    assert to_sexpr(assign.child("TERM"), lexemes=True) == "TERM(ATOMIC(CONST(N:'5')))"

    assert [(lf.terminal, lf.lexeme) for lf in leaves(root)] == [p for p in SMALL_PROGRAM[:-1]]
    assert all(len(s.states) == s.nodes + 1 for s in steps)


def test_small_program_same_tree_for_both_tables(recspl_slr, recspl_lalr):
    assert parse_terminals(SMALL_PROGRAM, recspl_slr) == parse_terminals(SMALL_PROGRAM, recspl_lalr)


def test_frontend_parses_full_program(recspl_program):
    root = Frontend().parse(recspl_program)
    labels = {n.label for n in walk(root)}
    assert {"BRANCH", "CALL", "OP", "COND", "SIMPLE", "DECL", "HEADER", "BODY", "LOCVARS",
            "PROLOG", "EPILOG", "SUBFUNCS"} <= labels
    lexemes = [lf.lexeme for lf in leaves(root)]
    assert lexemes == [t.text for t in tokenize(recspl_program)]
    assert '"hi"' in lexemes


def test_frontend_ids_disjoint_across_calls(recspl_program):
    fe = Frontend()
    a = fe.parse(recspl_program)
    b = fe.parse(recspl_program)
    assert a == b
    assert a.id < min(n.id for n in walk(b))


def test_parse_source_syntax_error_location():
    src = "main\nnum V_x ,\nbegin\n  V_x = 5\nend\n"
    with pytest.raises(TableLookupError) as ei:
        parse_source(src)
    err = ei.value
    assert err.offending == "end"
    assert ";" in err.expected
    assert (err.line, err.col) == (5, 1)
    assert str(err).endswith("end\n^")


def test_parse_source_missing_tail_reports_eof():
    with pytest.raises(TableLookupError) as ei:
        parse_source("main begin halt ;")
    assert ei.value.offending == "$"
    assert "end" in ei.value.expected
    assert str(ei.value).startswith("Parse error at EOF:")


def test_parse_source_lex_error():
    with pytest.raises(LexError):
        parse_source("main begin V_x = 5 @ ; end")


def test_long_program_trees_compare_equal():
    src = "main num V_x , begin " + "V_x = 5 ; " * 400 + "end"
    fe = Frontend()
    a, b = fe.parse(src), fe.parse(src)
    assert a == b
    assert hash(a) == hash(b)


def test_adapter_covers_lexer_token_classes():
    assert RecsplLexer.token_classes == TOKEN_CLASSES
    adapter = TerminalMap.for_recspl(recspl_grammar())
    assert all(cls in adapter for cls in RecsplLexer.token_classes)


def test_shared_table_across_threads(recspl_program):
    table = recspl_table()
    bad = "main begin halt end"
    results = {}

    def work(k):
        fe = Frontend(table)
        trees, ids, failures = [], [], 0
        for i in range(20):
            if k == 0 and i % 5 == 0:
                try:
                    fe.parse(bad)
                except TableLookupError:
                    failures += 1
                continue
            tree = fe.parse(recspl_program)
            trees.append(tree)
            ids.append(sorted(node_ids(tree)))
        results[k] = (trees, ids, failures)

    threads = [threading.Thread(target=work, args=(k,)) for k in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == [0, 1, 2, 3]
    assert results[0][2] == 4
    reference = Frontend(table).parse(recspl_program)
    for trees, ids, _ in results.values():
        assert all(t == reference for t in trees)
        flat = [i for run in ids for i in run]
        assert flat == sorted(flat)
        assert len(set(flat)) == len(flat)
