# recspl/grammar/recspl.py
"""RecSPL 정규(canonical) 문법과 단말 알파벳.

단말 이름 규약
-------------
- 키워드/연산자/구두점: 철자 그대로 (`main`, `num`, `=`, `(`, ...)
- 이름/상수 클래스: `V`(변수), `F`(함수), `N`(숫자 상수), `T`(텍스트 상수)
- EOF: `$`

규칙 번호는 아래 텍스트의 등장 순서(증강 규칙 0번 다음부터 1, 2, ...)입니다.
"""

from __future__ import annotations
from functools  import lru_cache

from .ast import Grammar
from .loader import parse_bnf

RECSPL_BNF = """\
%start PROG

PROG      -> main GLOBVARS ALGO FUNCTIONS
GLOBVARS  -> ε
           | VTYP VNAME , GLOBVARS
VTYP      -> num
           | text
VNAME     -> V
ALGO      -> begin INSTRUC end
INSTRUC   -> ε
           | COMMAND ; INSTRUC
COMMAND   -> skip
           | halt
           | print ATOMIC
           | ASSIGN
           | CALL
           | BRANCH
           | return ATOMIC
ATOMIC    -> VNAME
           | CONST
CONST     -> N
           | T
ASSIGN    -> VNAME < input
           | VNAME = TERM
CALL      -> FNAME ( ATOMIC , ATOMIC , ATOMIC )
BRANCH    -> if COND then ALGO else ALGO
TERM      -> ATOMIC
           | CALL
           | OP
OP        -> UNOP ( ARG )
           | BINOP ( ARG , ARG )
ARG       -> ATOMIC
           | OP
COND      -> SIMPLE
           | COMPOSIT
SIMPLE    -> BINOP ( ATOMIC , ATOMIC )
COMPOSIT  -> BINOP ( SIMPLE , SIMPLE )
           | UNOP ( SIMPLE )
UNOP      -> not
           | sqrt
BINOP     -> or
           | and
           | eq
           | grt
           | add
           | sub
           | mul
           | div
FNAME     -> F
FUNCTIONS -> ε
           | DECL FUNCTIONS
DECL      -> HEADER BODY
HEADER    -> FTYP FNAME ( VNAME , VNAME , VNAME )
FTYP      -> num
           | void
BODY      -> PROLOG LOCVARS ALGO EPILOG SUBFUNCS end
PROLOG    -> {
EPILOG    -> }
LOCVARS   -> VTYP VNAME , VTYP VNAME , VTYP VNAME ,
SUBFUNCS  -> FUNCTIONS
"""


@lru_cache(maxsize=None)
def recspl_grammar() -> Grammar:
    """RecSPL 문법(불변). 여러 파서가 공유해도 안전합니다."""
    return parse_bnf(RECSPL_BNF)
