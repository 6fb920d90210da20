# recspl/lalr/runtime.py
"""LR 파서 런타임(스택 머신).

- 불변 `ParseTable`(ACTION/GOTO + 문법)을 받아 (terminal, lexeme) 시퀀스를 파싱하고
  AST 루트 노드 하나를 돌려줍니다.
- 상태 스택과 노드 스택을 나란히 유지합니다:
  `len(states) == len(nodes) + 1` 이 모든 단계에서 성립합니다.
- 에러 시, 해당 상태에서 가능한 단말(expected set)을 담은 `TableLookupError`,
  테이블 불량이면 `TableGotoError`/`MalformedTableError` 를 던집니다. 복구는 없습니다.
- 파싱 루프 안에서는 아무것도 출력하지 않습니다. 관찰이 필요하면 `trace` 콜백을 넘깁니다.
"""

from __future__ import annotations
from typing import Callable, Iterable, List, Optional, Tuple, Union
from dataclasses import dataclass

from ..errors import TableLookupError, TableGotoError, MalformedTableError, caret_snippet
from ..grammar.ast import EOF
from ..lex import LexTok
from ..lex.adapter import TerminalMap, TerminalTok
from ..syntax.builder import NodeIds, TreeBuilder
from ..syntax.nodes import Node
from .table import ParseTable, Shift, Reduce, Accept

InputItem = Union[TerminalTok, Tuple[str, str], str]


@dataclass(frozen=True)
class Step:
    """
    한 동작(shift/reduce/accept/error) 직후의 스냅샷.

    - kind     : 'shift' | 'reduce' | 'accept' | 'error'
    - state    : 동작을 결정한 시점의 최상단 상태
    - lookahead: 그 시점의 lookahead 단말
    - cursor   : 동작 이후 입력 커서(다음에 읽을 단말의 인덱스)
    - states   : 동작 이후 상태 스택
    - nodes    : 동작 이후 노드 스택 길이
    - arg      : shift 대상 상태 / reduce 규칙 번호
    """
    kind: str
    state: int
    lookahead: str
    cursor: int
    states: Tuple[int, ...]
    nodes: int
    arg: Optional[int] = None

    def __str__(self) -> str:
        arg = "" if self.arg is None else f" {self.arg}"
        return (f"{self.kind:<6}{arg:<4} state={self.state} la={self.lookahead!r} "
                f"cursor={self.cursor} stack={list(self.states)}")


Trace = Callable[[Step], None]


def _normalize(stream: Iterable[InputItem]) -> List[TerminalTok]:
    """입력을 TerminalTok 리스트로 정규화하고 EOF 규약을 검사한다."""
    toks: List[TerminalTok] = []
    for item in stream:
        if isinstance(item, TerminalTok):
            toks.append(item)
        elif isinstance(item, str):
            toks.append(TerminalTok(item, "" if item == EOF else item))
        else:
            term, lexeme = item
            toks.append(TerminalTok(term, lexeme))
    if not toks or toks[-1].terminal != EOF:
        raise ValueError(f"Input must end with the end-of-input terminal {EOF!r}")
    for i, t in enumerate(toks[:-1]):
        if t.terminal == EOF:
            raise ValueError(f"End-of-input terminal {EOF!r} at position {i} before the end of input")
    return toks


class LRParser:
    """
    LRParser
    ========
    테이블 하나에 묶인 파서. 테이블은 여러 파서/스레드가 공유해도 되지만,
    파서 인스턴스(와 그 id 발급기)는 한 스레드에서만 사용합니다.

    같은 파서로 여러 번 파싱하면 id 범위가 서로 겹치지 않습니다.
    """

    def __init__(self, table: ParseTable, *, ids: Optional[NodeIds] = None):
        self.table = table
        self.ids = ids if ids is not None else NodeIds()

    def parse(self,
              stream: Iterable[InputItem],
              *,
              ids: Optional[NodeIds] = None,
              trace: Optional[Trace] = None,
              source: Optional[str] = None) -> Node:
        """
        (terminal, lexeme) 시퀀스를 파싱합니다.

        Parameters
        ----------
        stream : Iterable
            `TerminalTok`, `(terminal, lexeme)` 쌍 또는 단말 이름 문자열.
            정확히 하나의 '$' 로 끝나야 합니다.
        ids : NodeIds, optional
            이번 호출에만 쓸 id 발급기. 없으면 파서의 발급기를 씁니다.
        trace : Callable[[Step], None], optional
            매 동작 직후 호출되는 관찰 콜백.
        source : str, optional
            원문. 주어지면 구문 오류 메시지에 캐럿 스니펫을 붙입니다.

        Returns
        -------
        Node
            accept 시 노드 스택에 남은 유일한 노드(트리 루트).
        """
        toks = _normalize(stream)
        table = self.table
        build = TreeBuilder(ids if ids is not None else self.ids)

        # 상태 스택(정수)과 노드 스택: 시작 상태에서 시작
        states: List[int] = [table.start_state]
        nodes: List[Node] = []
        cursor = 0

        def emit(kind: str, s: int, a: str, arg: Optional[int] = None) -> None:
            if trace is not None:
                trace(Step(kind, s, a, cursor, tuple(states), len(nodes), arg))

        while True:
            s = states[-1]
            look = toks[cursor]
            a = look.terminal
            act = table.action_for(s, a)

            if isinstance(act, Shift):
                # 잎 노드 + 상태 push, 입력 소비
                nodes.append(build.leaf(a, look.lexeme))
                states.append(act.target)
                cursor += 1
                emit("shift", s, a, act.target)
                continue

            if isinstance(act, Reduce):
                p = table.production(act.rule_id)
                lhs = p.lhs.name
                n = len(p.rhs)
                if n > len(nodes):
                    raise TableGotoError(s, lhs, act.rule_id,
                                         reason=f"Reduce pops {n} entries from a stack holding {len(nodes)}")
                # 자식: 꺼낸 노드들을 원래의 왼쪽→오른쪽 순서로 (ε면 빈 리스트)
                children = nodes[len(nodes) - n:]
                del nodes[len(nodes) - n:]
                del states[len(states) - n:]
                node = build.internal(lhs, children)
                t = states[-1]
                goto_state = table.goto_for(t, lhs)
                if goto_state is None:
                    raise TableGotoError(t, lhs, act.rule_id)
                nodes.append(node)
                states.append(goto_state)
                emit("reduce", s, a, act.rule_id)
                continue

            if isinstance(act, Accept):
                if len(nodes) != 1:
                    raise MalformedTableError(
                        f"Accept in state {s} with {len(nodes)} nodes on the stack (expected exactly 1)")
                emit("accept", s, a)
                return nodes[0]

            # 에러: expected set 수집 후 중단
            emit("error", s, a)
            snippet = None
            if source is not None and look.pos is not None:
                snippet = caret_snippet(source, min(look.pos, len(source)))
            raise TableLookupError(
                s, a, table.expected_terminals(s),
                lexeme=look.lexeme if a != EOF else None,
                line=look.line, col=look.col, snippet=snippet,
            )

    def parse_tokens(self,
                     tokens: Iterable[LexTok],
                     adapter: TerminalMap,
                     *,
                     trace: Optional[Trace] = None,
                     source: Optional[str] = None) -> Node:
        """렉서 토큰 → (adapter) → 단말 시퀀스 → 파싱. 매핑 오류는 파싱 시작 전에 납니다."""
        return self.parse(adapter.adapt(tokens), trace=trace, source=source)


def parse_terminals(stream: Iterable[InputItem],
                    table: ParseTable,
                    *,
                    ids: Optional[NodeIds] = None,
                    trace: Optional[Trace] = None,
                    source: Optional[str] = None) -> Node:
    """한 번 쓰고 버리는 파서로 파싱. ids를 주지 않으면 0부터 새로 발급합니다."""
    return LRParser(table, ids=ids).parse(stream, trace=trace, source=source)
