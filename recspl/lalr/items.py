# recspl/lalr/items.py
"""LR(0) DFA와 SLR(1)/LALR(1) 테이블 작성.

이 모듈은 증강 규칙을 포함한 `Grammar` 를 입력으로 받아
- LR(0) 아이템/클로저/고토
- 상태 DFA 구성
- SLR(1) ACTION/GOTO 테이블 산출
- LALR(1) ACTION/GOTO 테이블 산출 (canonical LR(1) → same-core 병합)
을 수행하고 불변 `ParseTable` 을 돌려준다.

충돌 정책: shift 우선, reduce/reduce는 더 작은 규칙 번호 우선. 충돌은
`ParseTable.conflicts` 에 기록되며, strict 모드에서는 GrammarConflictError.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Dict, Set, Tuple, Optional

from ..errors import GrammarConflictError
from ..grammar.ast import Grammar, EOF, AUG_START
from .table import ParseTable, Action, Shift, Reduce, ACCEPT, Accept, Conflict
from .first_follow import FFResult, compute_nullable_first_follow


# ---------- LR(0) 아이템 ----------
@dataclass(frozen=True)
class Item:
    """LR(0) 아이템: [A -> α · β]"""
    prod_idx: int
    dot: int

    def __str__(self) -> str:
        return f"(p={self.prod_idx}, dot={self.dot})"


def _next_symbol(g: Grammar, prod_idx: int, dot: int) -> Optional[str]:
    rhs = g.productions[prod_idx].rhs
    return rhs[dot].name if dot < len(rhs) else None


def _kernel_key_lr0(items: Set[Item]) -> Tuple[Tuple[int, int], ...]:
    """LR(0) 커널 아이템만 정렬해 커널 키 생성."""
    ker = [it for it in items if it.dot != 0 or it.prod_idx == 0]
    ker.sort(key=lambda x: (x.prod_idx, x.dot))
    return tuple((it.prod_idx, it.dot) for it in ker)


def _closure_lr0(items: Set[Item], g: Grammar) -> Set[Item]:
    I = set(items)
    work = list(I)
    while work:
        it = work.pop()
        X = _next_symbol(g, it.prod_idx, it.dot)
        if X is None or not g.is_nonterminal(X):
            continue
        for pj in g.productions_of(X):
            new_item = Item(pj, 0)
            if new_item not in I:
                I.add(new_item)
                work.append(new_item)
    return I


def _goto_lr0(items: Set[Item], X: str, g: Grammar) -> Set[Item]:
    return {Item(it.prod_idx, it.dot + 1) for it in items
            if _next_symbol(g, it.prod_idx, it.dot) == X}


# ---------- ACTION/GOTO 기록 ----------

class _TableWriter:
    """ACTION/GOTO 칸을 채우며 충돌을 기록한다."""

    def __init__(self, g: Grammar):
        self.g = g
        self.action: Dict[Tuple[int, str], Action] = {}
        self.goto: Dict[Tuple[int, str], int] = {}
        self.conflicts: List[Conflict] = []

    def transition(self, s: int, X: str, t: int) -> None:
        if self.g.is_nonterminal(X):
            self.goto[(s, X)] = t
            return
        key = (s, X)
        prev = self.action.get(key)
        if prev is not None and prev != Shift(t):
            kind = "reduce" if isinstance(prev, Reduce) else "accept"
            self.conflicts.append((s, X, ("shift", kind)))
        self.action[key] = Shift(t)

    def accept(self, s: int) -> None:
        key = (s, EOF)
        prev = self.action.get(key)
        if prev is not None and not isinstance(prev, Accept):
            self.conflicts.append((s, EOF, ("accept", "reduce" if isinstance(prev, Reduce) else "shift")))
        self.action[key] = ACCEPT

    def reduce(self, s: int, a: str, prod_idx: int) -> None:
        key = (s, a)
        prev = self.action.get(key)
        if prev is None:
            self.action[key] = Reduce(prod_idx)
        elif isinstance(prev, Shift):
            self.conflicts.append((s, a, ("shift", "reduce")))
        elif isinstance(prev, Reduce) and prev.rule_id != prod_idx:
            self.conflicts.append((s, a, ("reduce", "reduce")))
            if prod_idx < prev.rule_id:
                self.action[key] = Reduce(prod_idx)
        elif isinstance(prev, Accept):
            self.conflicts.append((s, a, ("accept", "reduce")))

    def finish(self, start_state: int, n_states: int, state_items: List[List[str]], strict: bool) -> ParseTable:
        tbl = ParseTable(
            grammar=self.g,
            action=self.action,
            goto=self.goto,
            start_state=start_state,
            n_states=n_states,
            conflicts=tuple(self.conflicts),
            state_items=tuple(tuple(lines) for lines in state_items),
        )
        if strict and tbl.conflicts:
            raise GrammarConflictError(tbl.pretty_conflicts())
        return tbl


def _fmt_item(g: Grammar, pi: int, d: int, las: Optional[Set[str]] = None) -> str:
    p = g.productions[pi]
    rhs = p.rhs_names()
    rhs.insert(d, "·")
    if las is None:
        return f"[{p.lhs.name} -> {' '.join(rhs)}]"
    las_s = ", ".join(sorted(las)) if las else "∅"
    return f"[{p.lhs.name} -> {' '.join(rhs)} , {{{las_s}}}]"


# ---------- SLR(1) 테이블 빌더 ----------

def build_slr_tables(g: Grammar, ff: Optional[FFResult] = None, *, strict: bool = False) -> ParseTable:
    """
    Grammar + FOLLOW 집합으로 **SLR(1) ACTION/GOTO** 테이블을 생성한다.
    절차: LR(0) DFA → FOLLOW 기반 reduce → 테이블 생성
    """
    if ff is None:
        ff = compute_nullable_first_follow(g)

    # --- 1) I0 ---
    I0 = _closure_lr0({Item(0, 0)}, g)
    states: List[Set[Item]] = []
    state_index: Dict[Tuple[Tuple[int, int], ...], int] = {}

    def add_state(items: Set[Item]) -> Tuple[int, bool]:
        ker = _kernel_key_lr0(items)
        if ker in state_index:
            return state_index[ker], False
        idx = len(states)
        states.append(items)
        state_index[ker] = idx
        return idx, True

    start_state, _ = add_state(I0)

    # --- 2) DFA (상태 번호를 안정적으로: 너비 우선, 심볼 정렬) ---
    worklist: List[int] = [start_state]
    transitions: Dict[Tuple[int, str], int] = {}
    while worklist:
        s = worklist.pop(0)
        I = states[s]
        next_syms = {X for X in (_next_symbol(g, it.prod_idx, it.dot) for it in I) if X is not None}
        for X in sorted(next_syms):
            J = _closure_lr0(_goto_lr0(I, X, g), g)
            j_idx, is_new = add_state(J)
            transitions[(s, X)] = j_idx
            if is_new:
                worklist.append(j_idx)

    # --- 3) ACTION/GOTO ---
    w = _TableWriter(g)
    for (s, X), t in sorted(transitions.items()):
        w.transition(s, X, t)
    for s, I in enumerate(states):
        for it in sorted(I, key=lambda x: (x.prod_idx, x.dot)):
            p = g.productions[it.prod_idx]
            if it.dot != len(p.rhs):
                continue
            if p.lhs.name == AUG_START:
                w.accept(s)
            else:
                for a in sorted(ff.follow[p.lhs.name]):
                    w.reduce(s, a, it.prod_idx)

    # --- 4) 디버그 문자열 ---
    state_items = [[_fmt_item(g, it.prod_idx, it.dot) for it in sorted(I, key=lambda x: (x.prod_idx, x.dot))]
                   for I in states]
    return w.finish(start_state, len(states), state_items, strict)


# ---------- LALR(1) 빌더 ----------

LR1State = Dict[Tuple[int, int], Set[str]]


def _state_repr_lr1(items: LR1State) -> Tuple[Tuple[int, int, Tuple[str, ...]], ...]:
    """상태(아이템 맵)를 해시 가능 튜플로 직렬화 (canonical 상태 비교용)."""
    return tuple(sorted((pi, d, tuple(sorted(la))) for (pi, d), la in items.items()))


def _kernel_core_key_lr1(items: LR1State) -> Tuple[Tuple[int, int], ...]:
    """same-core 병합용 커널 코어 키(lookahead 제외). 커널: dot>0 또는 증강 시작 아이템(p0,0)"""
    return tuple(sorted((pi, d) for (pi, d) in items if d != 0 or pi == 0))


def _closure_lr1(state: LR1State, g: Grammar, ff: FFResult) -> None:
    """in-place 고정점: LR(1) closure. state[(pi,d)] = lookahead set"""
    changed = True
    while changed:
        changed = False
        for (pi, d), look in list(state.items()):
            B = _next_symbol(g, pi, d)
            if B is None or not g.is_nonterminal(B):
                continue
            # FIRST(β a): β가 전부 nullable이면 lookahead도 포함
            LA, beta_nullable = ff.first_of_sequence(g.productions[pi].rhs[d + 1:])
            if beta_nullable:
                LA = LA | look
            for pj in g.productions_of(B):
                s = state.setdefault((pj, 0), set())
                old_len = len(s)
                s |= LA
                if len(s) != old_len:
                    changed = True


def _goto_lr1(state: LR1State, X: str, g: Grammar, ff: FFResult) -> LR1State:
    """LR(1) goto: 점 뒤가 X인 아이템 전진 + closure."""
    nxt: LR1State = {}
    for (pi, d), look in state.items():
        if _next_symbol(g, pi, d) == X:
            nxt.setdefault((pi, d + 1), set()).update(look)
    if nxt:
        _closure_lr1(nxt, g, ff)
    return nxt


def build_lalr_tables(g: Grammar, ff: Optional[FFResult] = None, *, strict: bool = False) -> ParseTable:
    """
    build_lalr_tables
    =================
    Canonical LR(1)을 만든 뒤, same kernel(core)을 **병합**하여 LALR(1) 테이블을 생성합니다.

    절차
    ----
    1) 초기 아이템 [S'->·S, {$}] closure
    2) canonical LR(1) DFA 생성 (상태 동일성 = 아이템+lookahead 동일)
    3) same-core 병합: 커널 (prod_idx,dot) 집합이 같은 상태들의 lookahead 합집합 후 재-closure
    4) 병합 상태로 ACTION/GOTO 작성 (reduce는 lookahead 단말마다)
    """
    if ff is None:
        ff = compute_nullable_first_follow(g)

    # --- 1) 초기 상태 ---
    I0: LR1State = {(0, 0): {EOF}}
    _closure_lr1(I0, g, ff)

    states: List[LR1State] = []
    state_index: Dict[Tuple[Tuple[int, int, Tuple[str, ...]], ...], int] = {}

    def add_state(st: LR1State) -> Tuple[int, bool]:
        rep = _state_repr_lr1(st)
        if rep in state_index:
            return state_index[rep], False
        idx = len(states)
        states.append(st)
        state_index[rep] = idx
        return idx, True

    start_state, _ = add_state(I0)

    # --- 2) canonical LR(1) DFA ---
    worklist: List[int] = [start_state]
    transitions: Dict[Tuple[int, str], int] = {}
    while worklist:
        s = worklist.pop(0)
        I = states[s]
        next_syms = {X for X in (_next_symbol(g, pi, d) for (pi, d) in I) if X is not None}
        for X in sorted(next_syms):
            J = _goto_lr1(I, X, g, ff)
            j_idx, is_new = add_state(J)
            transitions[(s, X)] = j_idx
            if is_new:
                worklist.append(j_idx)

    # --- 3) same-core(LALR) 병합 (첫 등장 순서로 새 번호) ---
    group_to_newid: Dict[Tuple[Tuple[int, int], ...], int] = {}
    merged_states: List[LR1State] = []
    old_to_new: Dict[int, int] = {}
    for i, st in enumerate(states):
        core = _kernel_core_key_lr1(st)
        nid = group_to_newid.get(core)
        if nid is None:
            nid = len(merged_states)
            group_to_newid[core] = nid
            merged_states.append({k: set() for k in core})
        kernel_map = merged_states[nid]
        for k in core:
            kernel_map[k].update(st[k])
        old_to_new[i] = nid
    for kernel_map in merged_states:
        _closure_lr1(kernel_map, g, ff)

    merged_trans: Dict[Tuple[int, str], int] = {}
    for (i, X), j in transitions.items():
        merged_trans[(old_to_new[i], X)] = old_to_new[j]

    # --- 4) ACTION/GOTO 생성 ---
    w = _TableWriter(g)
    for (s, X), t in sorted(merged_trans.items()):
        w.transition(s, X, t)
    for s, st in enumerate(merged_states):
        for (pi, d) in sorted(st):
            p = g.productions[pi]
            if d != len(p.rhs):
                continue
            if p.lhs.name == AUG_START:
                if EOF in st[(pi, d)]:
                    w.accept(s)
            else:
                for a in sorted(st[(pi, d)]):
                    w.reduce(s, a, pi)

    # --- 5) 디버그 문자열 (lookahead 포함) ---
    state_items = [[_fmt_item(g, pi, d, st[(pi, d)]) for (pi, d) in sorted(st)] for st in merged_states]
    return w.finish(old_to_new[start_state], len(merged_states), state_items, strict)


def build_tables(g: Grammar, kind: str = "lalr", *, strict: bool = False) -> ParseTable:
    """kind: 'slr' | 'lalr'"""
    if kind == "slr":
        return build_slr_tables(g, strict=strict)
    if kind == "lalr":
        return build_lalr_tables(g, strict=strict)
    raise ValueError(f"Unknown parser kind: {kind!r} (expected 'slr' or 'lalr')")
