# recspl/lex/adapter.py
"""Token Adapter: 렉서 토큰 클래스를 테이블의 단말 알파벳으로 옮긴다.

계약
----
- 매핑은 **전사(total)**: 문법이 쓰는 모든 토큰 클래스는 정확히 하나의 단말을 가진다.
  매핑되지 않은 클래스는 설정 오류(MalformedTerminalMapping)이며, 파싱 시작 **전에**
  보고된다(`adapt` 는 스트림 전체를 먼저 변환한다).
- 마지막 실제 토큰 뒤에 EOF 단말('$')을 정확히 하나 붙인다.
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, AbstractSet

from ..errors import MalformedTerminalMapping
from ..grammar.ast import EOF, Grammar
from . import KEYWORDS, PUNCT, LexTok, RecsplLexer


@dataclass(frozen=True)
class TerminalTok:
    """파서 입력 단위: (terminal, lexeme) + 원문 위치(알 때만)."""
    terminal: str
    lexeme: str
    line: Optional[int] = None
    col: Optional[int] = None
    pos: Optional[int] = None


# RecSPL 렉서 클래스 → RecSPL 문법 단말
RECSPL_TERMINALS: Mapping[str, str] = MappingProxyType({
    **{cls: kw for kw, cls in KEYWORDS.items()},
    **{cls: p for p, cls in PUNCT.items()},
    "VAR": "V",
    "FUNC": "F",
    "NUMBER": "N",
    "STRING": "T",
})


class TerminalMap:
    """
    TerminalMap
    ===========
    토큰 클래스 → 단말 이름 매핑.

    Parameters
    ----------
    mapping : Mapping[str, str]
        토큰 클래스 이름 → 단말 이름.
    grammar : Grammar, optional
        주어지면 모든 대상 단말이 문법의 단말인지 검사합니다.
    token_classes : AbstractSet[str], optional
        렉서가 만들 수 있는 클래스 전체. 주어지면 매핑이 이를 모두 덮는지 검사합니다.
    """

    def __init__(self,
                 mapping: Mapping[str, str],
                 *,
                 grammar: Optional[Grammar] = None,
                 token_classes: Optional[AbstractSet[str]] = None):
        self._map = dict(mapping)
        for cls, term in self._map.items():
            if term == EOF:
                raise MalformedTerminalMapping(
                    cls, detail=f"Token class {cls!r} may not map to the end-of-input terminal {EOF!r}")
            if grammar is not None and not grammar.is_terminal(term):
                raise MalformedTerminalMapping(
                    cls, detail=f"Token class {cls!r} maps to {term!r}, which is not a terminal of the grammar")
        if token_classes is not None:
            missing = sorted(set(token_classes) - set(self._map))
            if missing:
                raise MalformedTerminalMapping(
                    missing[0], detail=f"No terminal mapped for token classes: {', '.join(missing)}")

    @classmethod
    def for_recspl(cls, grammar: Optional[Grammar] = None) -> "TerminalMap":
        return cls(RECSPL_TERMINALS, grammar=grammar, token_classes=RecsplLexer.token_classes)

    def terminal_of(self, token_class: str) -> str:
        try:
            return self._map[token_class]
        except KeyError:
            raise MalformedTerminalMapping(token_class) from None

    def adapt(self, tokens: Iterable[LexTok]) -> List[TerminalTok]:
        """
        토큰 스트림 전체를 (terminal, lexeme) 시퀀스로 변환하고 EOF를 하나 붙입니다.
        매핑되지 않은 클래스를 만나면 그 자리에서 MalformedTerminalMapping.
        """
        out: List[TerminalTok] = []
        last_line: Optional[int] = None
        last_end: Optional[int] = None
        for tok in tokens:
            if tok.type not in self._map:
                raise MalformedTerminalMapping(tok.type, line=tok.line, col=tok.col)
            out.append(TerminalTok(self._map[tok.type], tok.text, tok.line, tok.col, tok.pos))
            last_line = tok.line
            last_end = tok.pos + len(tok.text)
        out.append(TerminalTok(EOF, "", last_line, None, last_end))
        return out

    def __contains__(self, token_class: str) -> bool:
        return token_class in self._map

    def __len__(self) -> int:
        return len(self._map)
