# recspl/syntax/render.py
"""트리 직렬화. 파싱 루프 밖, 경계에서만 호출한다.

- to_sexpr   : `S(a, S(a, S(), b), b)` 형태의 한 줄 표현
- to_indented: `├──`/`└──` 가지를 그리는 여러 줄 표현
"""

from __future__ import annotations
from typing import List

from .nodes import Leaf, Node


def _leaf_text(n: Leaf, lexemes: bool) -> str:
    if lexemes and n.lexeme != n.terminal:
        return f"{n.terminal}:{n.lexeme!r}"
    return n.terminal


def to_sexpr(node: Node, *, lexemes: bool = False, ids: bool = False) -> str:
    """
    깊이 우선 S-식 표현.
    - 잎은 단말 이름(lexemes=True면 `V:'V_x'`)
    - 내부 노드는 `LABEL(child, child, ...)`, 자식이 없으면 `LABEL()`
    - ids=True면 각 라벨 뒤에 `#id`
    """
    # 깊은 트리에서도 재귀 한도를 피하도록 명시적 스택 사용
    out: List[str] = []
    stack: List[object] = [node]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            out.append(item)
            continue
        n = item
        tag = f"#{n.id}" if ids else ""
        if isinstance(n, Leaf):
            out.append(_leaf_text(n, lexemes) + tag)
            continue
        out.append(f"{n.label}{tag}(")
        stack.append(")")
        for i in range(len(n.children) - 1, -1, -1):
            stack.append(n.children[i])
            if i:
                stack.append(", ")
    return "".join(out)


def to_indented(node: Node, *, ids: bool = True, lexemes: bool = True) -> str:
    """가지 그림 표현. 한 줄에 노드 하나."""
    lines: List[str] = []
    # (node, prefix, is_tail, is_root)
    stack = [(node, "", True, True)]
    while stack:
        n, prefix, is_tail, is_root = stack.pop()
        text = _leaf_text(n, lexemes) if isinstance(n, Leaf) else n.label
        if ids:
            text += f" (ID: {n.id})"
        if is_root:
            lines.append(text)
            child_prefix = ""
        else:
            lines.append(prefix + ("└── " if is_tail else "├── ") + text)
            child_prefix = prefix + ("    " if is_tail else "│   ")
        kids = n.children
        for i in range(len(kids) - 1, -1, -1):
            stack.append((kids[i], child_prefix, i == len(kids) - 1, False))
    return "\n".join(lines)
