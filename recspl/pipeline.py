# recspl/pipeline.py
"""원문 → 토큰 → 단말 → AST 파이프라인 조립.

테이블 출처는 둘 중 하나입니다.
- JSON 아티팩트(`load_table`)
- RecSPL 문법에서 재생성(`recspl_table`, 프로세스당 한 번 생성해 공유)
"""

from __future__ import annotations
from functools import lru_cache
from typing import Optional

from .grammar.recspl import recspl_grammar
from .lalr.items import build_tables
from .lalr.runtime import LRParser, Trace
from .lalr.table import ParseTable
from .lex import RecsplLexer
from .lex.adapter import TerminalMap
from .syntax.nodes import Node


@lru_cache(maxsize=None)
def recspl_table(kind: str = "lalr") -> ParseTable:
    """RecSPL 문법으로 만든 불변 테이블. 충돌이 있으면 GrammarConflictError."""
    return build_tables(recspl_grammar(), kind, strict=True)


class Frontend:
    """
    렉서 + 어댑터 + LR 파서 묶음.

    Parameters
    ----------
    table : ParseTable, optional
        없으면 `recspl_table()` 를 사용합니다.
    """

    def __init__(self, table: Optional[ParseTable] = None):
        self.table = table if table is not None else recspl_table()
        self.lexer = RecsplLexer()
        self.adapter = TerminalMap.for_recspl(self.table.grammar)
        self.parser = LRParser(self.table)

    def parse(self, text: str, *, trace: Optional[Trace] = None) -> Node:
        tokens = self.lexer.tokenize(text)
        return self.parser.parse_tokens(tokens, self.adapter, trace=trace, source=text)


def parse_source(text: str, *, table: Optional[ParseTable] = None, trace: Optional[Trace] = None) -> Node:
    return Frontend(table).parse(text, trace=trace)
