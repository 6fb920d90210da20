from __future__ import annotations
from typing import Dict, Set, Tuple, Sequence
from dataclasses import dataclass

from ..grammar.ast import Grammar, Symbol, Terminal, EOF, AUG_START


@dataclass
class FFResult:
    """
    FFResult
    ========
    FIRST/FOLLOW/NULLABLE 계산 결과를 담는 단순 컨테이너입니다.

    - nullable: ε-생산 가능한 비단말 집합 (이름 기반)
    - first: 각 **심볼 이름** → FIRST 집합(단말 이름들의 집합)
    - follow: 각 **비단말 이름** → FOLLOW 집합(단말 이름들의 집합)
      * 시작 기호 S 에는 항상 '$'가 포함됩니다.
    """
    nullable: Set[str]
    first: Dict[str, Set[str]]
    follow: Dict[str, Set[str]]

    def first_of_sequence(self, seq: Sequence[Symbol]) -> Tuple[Set[str], bool]:
        """
        심볼 시퀀스 seq의 FIRST 집합과 'seq 자체가 nullable인지' 여부를 반환합니다.
        별도의 ε 기호를 넣지 않고 두 번째 값이 이를 대변합니다.
        """
        out: Set[str] = set()
        for X in seq:
            if isinstance(X, Terminal):
                out.add(X.name)
                return out, False
            out |= self.first[X.name]
            if X.name not in self.nullable:
                return out, False
        return out, True


def compute_nullable_first_follow(g: Grammar) -> FFResult:
    """
    compute_nullable_first_follow
    =============================
    문법에 대해 NULLABLE/FIRST/FOLLOW 집합을 계산합니다.
    증강 규칙(S' -> start)도 다른 규칙과 똑같이 취급하며, FOLLOW(S')와
    FOLLOW(start)에는 '$'가 들어갑니다.

    알고리즘 개요
    ------------
    1) NULLABLE: ε-프로덕션이 있거나, 우변 전체가 nullable이면 추가 (고정점)
    2) FIRST   : 각 프로덕션 A -> α 에 대해 FIRST(α)를 FIRST(A)에 합집합 (고정점)
    3) FOLLOW  : 오른쪽에서 왼쪽으로 trailer를 전파 (고정점)
    """
    ff = FFResult(nullable=set(), first={}, follow={})

    # ---------- 0) 준비 ----------
    for t in g.terminals:
        ff.first[t] = {t}
    for A in g.nonterminals:
        ff.first[A] = set()

    # ---------- 1) NULLABLE 고정점 ----------
    changed = True
    while changed:
        changed = False
        for p in g.productions:
            A = p.lhs.name
            if A in ff.nullable:
                continue
            if all(not isinstance(X, Terminal) and X.name in ff.nullable for X in p.rhs):
                ff.nullable.add(A)
                changed = True

    # ---------- 2) FIRST 고정점 ----------
    changed = True
    while changed:
        changed = False
        for p in g.productions:
            A = p.lhs.name
            f_alpha, _ = ff.first_of_sequence(p.rhs)
            before = len(ff.first[A])
            ff.first[A] |= f_alpha
            if len(ff.first[A]) != before:
                changed = True

    # ---------- 3) FOLLOW 고정점 ----------
    ff.follow = {A: set() for A in g.nonterminals}
    ff.follow[AUG_START].add(EOF)
    ff.follow[g.start].add(EOF)

    changed = True
    while changed:
        changed = False
        for p in g.productions:
            trailer: Set[str] = set(ff.follow[p.lhs.name])
            for X in reversed(p.rhs):
                if isinstance(X, Terminal):
                    trailer = {X.name}
                    continue
                before = len(ff.follow[X.name])
                ff.follow[X.name] |= trailer
                if len(ff.follow[X.name]) != before:
                    changed = True
                # trailer 갱신: FIRST(X) ∪ (nullable(X) ? trailer : ∅)
                trailer = set(ff.first[X.name]) | (trailer if X.name in ff.nullable else set())

    return ff
