# recspl/syntax/nodes.py
"""AST 노드 (태그 변형).

- Leaf    : shift 시 생성. 단말 이름 + 원문 lexeme
- Internal: reduce 시 생성. 비단말 이름 + 자식 튜플(왼쪽→오른쪽)

노드는 생성 후 불변이며, 자식은 부모가 단독 소유합니다(공유/역참조 없음).
`id` 는 비교(==)와 해시에서 제외되므로, 같은 입력을 두 번 파싱한 트리는 id가
달라도 서로 같다고 판정됩니다.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Tuple, Union


@dataclass(frozen=True, eq=False)
class Leaf:
    id: int
    terminal: str
    lexeme: str

    @property
    def label(self) -> str:
        return self.terminal

    @property
    def children(self) -> Tuple["Node", ...]:
        return ()

    is_leaf = True

    def __eq__(self, other):
        if not isinstance(other, (Leaf, Internal)):
            return NotImplemented
        return same_tree(self, other)

    def __hash__(self) -> int:
        return hash(_shape(self))


@dataclass(frozen=True, eq=False)
class Internal:
    id: int
    nonterminal: str
    children: Tuple["Node", ...] = ()

    @property
    def label(self) -> str:
        return self.nonterminal

    is_leaf = False

    def __eq__(self, other):
        if not isinstance(other, (Leaf, Internal)):
            return NotImplemented
        return same_tree(self, other)

    def __hash__(self) -> int:
        return hash(tuple(_shape(n) for n in walk(self)))

    def child(self, label: str) -> "Node":
        """label이 같은 첫 번째 자식. 없으면 KeyError."""
        for c in self.children:
            if c.label == label:
                return c
        raise KeyError(label)


Node = Union[Leaf, Internal]


def _shape(n: Node) -> Tuple[object, ...]:
    """자식을 따라 내려가지 않는 노드 한 개의 비교 키(id 제외)."""
    if isinstance(n, Leaf):
        return (Leaf, n.terminal, n.lexeme)
    return (Internal, n.nonterminal, len(n.children))


def same_tree(a: Node, b: Node) -> bool:
    """두 트리의 구조/라벨/lexeme 비교. 깊은 트리도 재귀 없이 명시적 스택으로."""
    stack = [(a, b)]
    while stack:
        x, y = stack.pop()
        if x is y:
            continue
        if _shape(x) != _shape(y):
            return False
        stack.extend(zip(x.children, y.children))
    return True


def walk(node: Node) -> Iterator[Node]:
    """전위(pre-order) 순회. 재귀 없이 명시적 스택을 사용."""
    stack = [node]
    while stack:
        n = stack.pop()
        yield n
        stack.extend(reversed(n.children))


def leaves(node: Node) -> Iterator[Leaf]:
    """왼쪽→오른쪽 잎 순서(= 입력 단말 순서)."""
    for n in walk(node):
        if isinstance(n, Leaf):
            yield n


def node_ids(node: Node) -> Iterator[int]:
    for n in walk(node):
        yield n.id
