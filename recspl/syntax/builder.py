# recspl/syntax/builder.py
"""AST Builder: shift/reduce 단계마다 노드를 만들고 id를 붙인다.

id 규칙
-------
- 잎/내부 노드 구분 없이 생성 순서대로 **엄격 증가**하는 정수
- 같은 `NodeIds` 에서 나온 id는 재사용/재할당되지 않음
- 프로세스 전역 카운터는 두지 않는다. `NodeIds` 는 파서 인스턴스가 소유하거나
  파싱 호출 시 주입한다.
"""

from __future__ import annotations
from typing import Sequence

from .nodes import Internal, Leaf, Node


class NodeIds:
    """단조 증가 id 발급기."""

    def __init__(self, start: int = 0):
        self._next = start

    def __call__(self) -> int:
        i = self._next
        self._next += 1
        return i

    @property
    def peek(self) -> int:
        """다음에 발급될 id (발급하지 않음)."""
        return self._next

    def __repr__(self) -> str:
        return f"NodeIds(next={self._next})"


class TreeBuilder:
    def __init__(self, ids: NodeIds):
        self.ids = ids

    def leaf(self, terminal: str, lexeme: str) -> Leaf:
        return Leaf(self.ids(), terminal, lexeme)

    def internal(self, nonterminal: str, children: Sequence[Node]) -> Internal:
        return Internal(self.ids(), nonterminal, tuple(children))
