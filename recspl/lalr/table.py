# recspl/lalr/table.py
"""ACTION/GOTO 파싱 테이블과 선언적 테이블 아티팩트(JSON).

- `Action` 은 `Shift(target) | Reduce(rule_id) | Accept | Error` 태그 변형입니다.
- `ParseTable` 은 생성 후 불변이며, 여러 파싱(스레드)에서 읽기 전용으로 공유됩니다.
- 아티팩트는 상태별 행(row) 단위로 저장합니다::

    {
      "format": "recspl-table/1",
      "start": "PROG",
      "start_state": 0,
      "n_states": 5,
      "productions": [{"id": 0, "lhs": "S'", "rhs": ["PROG"]}, ...],
      "action": {"0": {"main": "s2"}, "1": {"$": "acc"}, "4": {"begin": "r2"}},
      "goto":   {"0": {"PROG": 1}}
    }
"""
from __future__ import annotations
import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

from ..errors import TableFormatError, GrammarError
from ..grammar.ast import Grammar, Production, Terminal, NonTerminal, EOF, AUG_START

TABLE_FORMAT = "recspl-table/1"


# ---------- Action 태그 변형 ----------

@dataclass(frozen=True)
class Shift:
    target: int

    def __str__(self) -> str:
        return f"s{self.target}"


@dataclass(frozen=True)
class Reduce:
    rule_id: int

    def __str__(self) -> str:
        return f"r{self.rule_id}"


@dataclass(frozen=True)
class Accept:
    def __str__(self) -> str:
        return "acc"


@dataclass(frozen=True)
class Error:
    """ACTION 칸이 비어 있음을 나타내는 값(테이블에 저장되지 않음)."""
    def __str__(self) -> str:
        return "err"


ACCEPT = Accept()
ERROR = Error()

Action = Union[Shift, Reduce, Accept, Error]

# (state, symbol, (kind1, kind2)) 예: ('shift','reduce'), ('reduce','reduce')
Conflict = Tuple[int, str, Tuple[str, str]]


def encode_action(act: Action) -> str:
    if isinstance(act, Error):
        raise ValueError("Error is not stored in a table")
    return str(act)


def decode_action(text: str) -> Action:
    """'s3' | 'r2' | 'acc' → Action. 형식이 틀리면 TableFormatError."""
    if text == "acc":
        return ACCEPT
    kind, arg = text[:1], text[1:]
    if kind in ("s", "r") and arg.isascii() and arg.isdigit():
        n = int(arg)
        return Shift(n) if kind == "s" else Reduce(n)
    raise TableFormatError(f"Bad action entry {text!r} (expected 'sN', 'rN' or 'acc')")


# ---------- ParseTable ----------

@dataclass(frozen=True)
class ParseTable:
    """
    ParseTable
    ==========
    LR 파서 테이블과 디버그 정보를 담는 불변 컨테이너.

    필드
    ----
    - grammar    : 증강 규칙(0번)을 포함한 문법
    - action     : (state, terminal) -> Shift | Reduce | Accept
    - goto       : (state, nonterminal) -> next_state
    - start_state: 시작 상태 번호
    - n_states   : 전체 상태 수
    - conflicts  : 생성기가 기록한 충돌 (아티팩트에서 읽으면 비어 있음)
    - state_items: 디버깅용. 상태별 아이템 문자열

    expected-set은 상태 s의 ACTION 행에 있는 단말들의 집합입니다.
    """
    grammar: Grammar
    action: Mapping[Tuple[int, str], Action]
    goto: Mapping[Tuple[int, str], int]
    start_state: int
    n_states: int
    conflicts: Tuple[Conflict, ...] = ()
    state_items: Tuple[Tuple[str, ...], ...] = ()
    _rows: Dict[int, Mapping[str, Action]] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "action", MappingProxyType(dict(self.action)))
        object.__setattr__(self, "goto", MappingProxyType(dict(self.goto)))
        rows: Dict[int, Dict[str, Action]] = {}
        for (st, term), act in self.action.items():
            rows.setdefault(st, {})[term] = act
        self._rows.update({st: MappingProxyType(row) for st, row in rows.items()})

    # ----- 조회 -----
    def action_for(self, state: int, terminal: str) -> Action:
        """ACTION[state][terminal]. 칸이 없으면 ERROR."""
        return self.action.get((state, terminal), ERROR)

    def goto_for(self, state: int, nonterminal: str) -> Optional[int]:
        """GOTO[state][nonterminal]. 칸이 없으면 None."""
        return self.goto.get((state, nonterminal))

    def production(self, rule_id: int) -> Production:
        return self.grammar.production(rule_id)

    def action_row(self, state: int) -> Mapping[str, Action]:
        return self._rows.get(state, MappingProxyType({}))

    def expected_terminals(self, state: int) -> FrozenSet[str]:
        return frozenset(self.action_row(state))

    def pretty_conflicts(self) -> str:
        """
        충돌 목록을 사람이 읽기 좋은 문자열로 변환합니다.
        충돌이 없으면 '(no conflicts)' 반환.
        """
        if not self.conflicts:
            return "(no conflicts)"
        lines: List[str] = []
        for st, sym, kinds in self.conflicts:
            lines.append(f"state {st}, on {sym}: {kinds[0]} / {kinds[1]}")
        return "\n".join(lines)

    # ----- 검증 -----
    def validate(self) -> "ParseTable":
        """
        구조 검증. 실패 시 TableFormatError.
        - 상태 번호/shift 대상/goto 대상이 [0, n_states) 범위
        - reduce 규칙 번호가 유효하고 증강 규칙(0번)이 아님
        - ACTION 키는 단말, GOTO 키는 비단말
        - '$' 위에서의 shift 금지(EOF는 accept/reduce/error의 계기일 뿐)
        결정성(충돌 없음)은 테이블 생성기의 책임이므로 여기서는 보지 않습니다.
        """
        g = self.grammar
        n = self.n_states
        if not 0 <= self.start_state < n:
            raise TableFormatError(f"start_state {self.start_state} out of range (n_states={n})")
        has_accept = False
        for (st, term), act in self.action.items():
            if not 0 <= st < n:
                raise TableFormatError(f"ACTION row for unknown state {st}")
            if not g.is_terminal(term):
                raise TableFormatError(f"ACTION[{st}] keyed by non-terminal symbol {term!r}")
            if isinstance(act, Shift):
                if term == EOF:
                    raise TableFormatError(f"ACTION[{st}][{EOF}] shifts the end-of-input marker")
                if not 0 <= act.target < n:
                    raise TableFormatError(f"ACTION[{st}][{term}] shifts to unknown state {act.target}")
            elif isinstance(act, Reduce):
                if not 0 < act.rule_id < len(g.productions):
                    raise TableFormatError(f"ACTION[{st}][{term}] reduces by unknown rule {act.rule_id}")
            elif isinstance(act, Accept):
                has_accept = True
            else:
                raise TableFormatError(f"ACTION[{st}][{term}] holds {act!r}")
        if not has_accept:
            raise TableFormatError("Table has no accept entry")
        for (st, nt), tgt in self.goto.items():
            if not 0 <= st < n:
                raise TableFormatError(f"GOTO row for unknown state {st}")
            if not g.is_nonterminal(nt) or nt == AUG_START:
                raise TableFormatError(f"GOTO[{st}] keyed by unknown non-terminal {nt!r}")
            if not 0 <= tgt < n:
                raise TableFormatError(f"GOTO[{st}][{nt}] targets unknown state {tgt}")
        return self

    # ----- 아티팩트 -----
    def to_dict(self) -> Dict[str, Any]:
        action: Dict[str, Dict[str, str]] = {}
        for (st, term), act in sorted(self.action.items()):
            action.setdefault(str(st), {})[term] = encode_action(act)
        goto: Dict[str, Dict[str, int]] = {}
        for (st, nt), tgt in sorted(self.goto.items()):
            goto.setdefault(str(st), {})[nt] = tgt
        return {
            "format": TABLE_FORMAT,
            "start": self.grammar.start,
            "start_state": self.start_state,
            "n_states": self.n_states,
            "productions": [
                {"id": p.rule_id, "lhs": p.lhs.name, "rhs": p.rhs_names()}
                for p in self.grammar.productions
            ],
            "action": action,
            "goto": goto,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ParseTable":
        """아티팩트 dict → ParseTable (검증 포함)."""
        try:
            if data.get("format") != TABLE_FORMAT:
                raise TableFormatError(f"Unsupported table format {data.get('format')!r}")
            raw_prods = data["productions"]
            nonterms = {str(rp["lhs"]) for rp in raw_prods}
            prods: List[Production] = []
            for rp in raw_prods:
                rhs = tuple(NonTerminal(s) if s in nonterms else Terminal(s) for s in rp["rhs"])
                prods.append(Production(int(rp["id"]), NonTerminal(str(rp["lhs"])), rhs))
            prods.sort(key=lambda p: p.rule_id)
            start = data.get("start") or (prods[0].rhs[0].name if prods and prods[0].rhs else "")
            grammar = Grammar.from_productions(start, prods)

            action: Dict[Tuple[int, str], Action] = {}
            for st, row in data["action"].items():
                for term, text in row.items():
                    action[(int(st), term)] = decode_action(text)
            goto: Dict[Tuple[int, str], int] = {}
            for st, row in data.get("goto", {}).items():
                for nt, tgt in row.items():
                    goto[(int(st), nt)] = int(tgt)
            n_states = int(data["n_states"])
            start_state = int(data.get("start_state", 0))
        except GrammarError as e:
            raise TableFormatError(f"Bad productions in table artifact: {e}") from e
        except (KeyError, TypeError, ValueError, IndexError, AttributeError) as e:
            if isinstance(e, TableFormatError):
                raise
            raise TableFormatError(f"Malformed table artifact: {type(e).__name__}: {e}") from e

        return cls(grammar, action, goto, start_state, n_states).validate()


def dump_table(table: ParseTable, path: Union[str, Path]) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(table.to_dict(), indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def load_table(path: Union[str, Path]) -> ParseTable:
    """JSON 아티팩트를 한 번 읽어 불변 테이블을 만듭니다."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise TableFormatError(f"{path}: not valid JSON ({e})") from e
    if not isinstance(data, dict):
        raise TableFormatError(f"{path}: top-level JSON value must be an object")
    return ParseTable.from_dict(data)
