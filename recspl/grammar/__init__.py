from .ast import Grammar, Production, Terminal, NonTerminal, Symbol, EOF, AUG_START
from .loader import parse_bnf, load_grammar, load_grammar_text
from .recspl import RECSPL_BNF, recspl_grammar
