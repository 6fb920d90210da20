import pytest

from recspl.errors import GrammarError
from recspl.grammar import (
    AUG_START, EOF, Grammar, NonTerminal, Production, Terminal, load_grammar, parse_bnf, recspl_grammar,
)


def test_parse_bnf_alternatives_and_epsilon():
    g = parse_bnf(
        """
        # 괄호 문법
        %start S
        S -> ( S ) S
           | ε
        """
    )
    assert g.start == "S"
    assert [str(p) for p in g.productions] == ["S' -> S", "S -> ( S ) S", "S -> ε"]
    assert g.terminals == frozenset({"(", ")", EOF})
    assert g.nonterminals == frozenset({"S", AUG_START})
    assert g.productions_of("S") == (1, 2)
    assert g.production(2).is_epsilon


def test_parse_bnf_inline_alternatives_and_empty_marker():
    g = parse_bnf("A -> x B | %empty\nB -> y |")
    assert [p.rhs_names() for p in g.productions[1:]] == [["x", "B"], [], ["y"], []]
    assert g.start == "A"


def test_start_defaults_to_first_rule():
    g = parse_bnf("B -> b\nA -> B")
    assert g.start == "B"
    assert g.production(0).rhs == (NonTerminal("B"),)


@pytest.mark.parametrize(
    "src",
    [
        "",
        "# only a comment\n",
        "| a",
        "A -> a\nthis is not a rule",
        "%start A\n%start B\nA -> a",
        "%start Z\nA -> a",
        "S' -> a",
        "A -> a $",
        "A -> a S'",
        "A -> a ε",
    ],
)
def test_parse_bnf_errors(src):
    with pytest.raises(GrammarError):
        parse_bnf(src)


def test_load_grammar_from_file(tmp_path):
    p = tmp_path / "toy.bnf"
    p.write_bytes(b"S -> a S b\r\n   | \xce\xb5\r\n")
    g = load_grammar(str(p))
    assert [str(p) for p in g.productions] == ["S' -> S", "S -> a S b", "S -> ε"]


def test_from_productions_validates_numbering():
    s = NonTerminal("S")
    prods = [Production(0, NonTerminal(AUG_START), (s,)), Production(1, s, (Terminal("a"),))]
    g = Grammar.from_productions("S", prods)
    assert g.is_terminal("a") and g.is_nonterminal("S")
    with pytest.raises(GrammarError):
        Grammar.from_productions("S", prods[::-1])
    with pytest.raises(GrammarError):
        Grammar.from_productions("T", prods)


def test_production_lookup_bounds():
    g = parse_bnf("S -> a")
    assert len(g) == 2
    with pytest.raises(IndexError):
        g.production(2)
    with pytest.raises(IndexError):
        g.production(-1)


def test_recspl_grammar_shape():
    g = recspl_grammar()
    assert g is recspl_grammar()
    assert g.start == "PROG"
    assert g.production(0).rhs_names() == ["PROG"]
    assert g.production(1).rhs_names() == ["main", "GLOBVARS", "ALGO", "FUNCTIONS"]
    assert {"V", "F", "N", "T", "main", "input", "<", "{", "}", EOF} <= g.terminals
    assert "COMMAND" in g.nonterminals
    assert not any(p.lhs.name == "PROG" and p.is_epsilon for p in g.productions)
