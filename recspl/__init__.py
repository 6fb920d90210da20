# recspl/__init__.py
"""RecSPL compiler front end.

This package provides:
- the RecSPL grammar model and a BNF loader (`recspl.grammar`)
- SLR(1)/LALR(1) table generation and a JSON table artifact (`recspl.lalr`)
- a table-driven LR automaton that builds the AST (`recspl.lalr.runtime`)
- the RecSPL lexer and token adapter (`recspl.lex`)
- AST nodes and tree serialization (`recspl.syntax`)

Scope resolution, type checking and code generation live outside this package.
"""

from .errors import (
    TableLookupError, TableGotoError, MalformedTableError, MalformedTerminalMapping,
    LexError, GrammarError, TableFormatError, GrammarConflictError,
)
from .grammar import Grammar, Production, Terminal, NonTerminal, EOF, parse_bnf, recspl_grammar
from .lalr import (
    ParseTable, Shift, Reduce, ACCEPT, ERROR, build_tables, load_table, dump_table,
    LRParser, Step, parse_terminals,
)
from .lex import RecsplLexer, LexTok, tokenize
from .lex.adapter import TerminalMap, TerminalTok
from .syntax import Leaf, Internal, NodeIds, to_sexpr, to_indented
from .pipeline import Frontend, parse_source, recspl_table

__version__ = "0.1.0"
