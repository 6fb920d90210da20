# recspl/grammar/ast.py
"""Grammar Model
- Terminal / NonTerminal: 심볼 태그 변형(tagged variant)
- Production: 규칙 1개 (rule_id, lhs, rhs). ε는 빈 rhs
- Grammar: 프로덕션 목록 + 단말/비단말 집합 (생성 후 불변)

규약
----
- 0번 규칙은 항상 증강 시작 규칙 `S' -> start` 입니다.
- EOF 단말 이름은 '$' 로 고정합니다(EOF 상수).
"""

from __future__     import annotations
from dataclasses    import dataclass, field
from typing         import Dict, FrozenSet, Iterable, List, Sequence, Tuple, Union

from ..errors import GrammarError

EOF = "$"
AUG_START = "S'"


@dataclass(frozen=True)
class Terminal:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class NonTerminal:
    name: str

    def __str__(self) -> str:
        return self.name


Symbol = Union[Terminal, NonTerminal]


@dataclass(frozen=True)
class Production:
    """
    BNF 프로덕션 1개.
    - rule_id: 테이블의 reduce 인자로 쓰이는 규칙 번호
    - lhs: 좌변 비단말
    - rhs: 우변 심볼 튜플(ε는 빈 튜플)
    """
    rule_id: int
    lhs: NonTerminal
    rhs: Tuple[Symbol, ...] = ()

    @property
    def is_epsilon(self) -> bool:
        return not self.rhs

    def rhs_names(self) -> List[str]:
        return [s.name for s in self.rhs]

    def __str__(self) -> str:
        rhs = " ".join(s.name for s in self.rhs) if self.rhs else "ε"
        return f"{self.lhs.name} -> {rhs}"


@dataclass(frozen=True)
class Grammar:
    """
    Grammar
    =======
    증강 규칙(0번)을 포함한 프로덕션 목록과 심볼 집합.

    필드
    ----
    - start       : 원래 시작 비단말
    - productions : rule_id 순서의 프로덕션 튜플 (productions[i].rule_id == i)
    - terminals   : '$' 를 포함한 단말 이름 집합
    - nonterminals: 증강 시작기호 S' 를 포함한 비단말 이름 집합
    """
    start: str
    productions: Tuple[Production, ...]
    terminals: FrozenSet[str]
    nonterminals: FrozenSet[str]
    _by_lhs: Dict[str, Tuple[int, ...]] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_rules(cls, start: str, rules: Iterable[Tuple[str, Sequence[str]]]) -> "Grammar":
        """
        (lhs, rhs 이름 리스트) 쌍들로부터 문법을 만듭니다.
        - 어떤 규칙의 좌변으로 등장하는 이름은 비단말, 나머지는 단말입니다.
        - 증강 규칙 `S' -> start` 가 0번으로 앞에 붙습니다.
        """
        rules = [(lhs, list(rhs)) for lhs, rhs in rules]
        if not rules:
            raise GrammarError("Grammar has no productions")
        lhs_names = {lhs for lhs, _ in rules}
        if start not in lhs_names:
            raise GrammarError(f"Start symbol {start!r} has no production")
        if AUG_START in lhs_names:
            raise GrammarError(f"{AUG_START!r} is reserved for the augmented start rule")

        terms = {EOF}
        for lhs, rhs in rules:
            for name in rhs:
                if name in (EOF, AUG_START):
                    raise GrammarError(f"{name!r} may not appear in a right-hand side ({lhs})")
                if name not in lhs_names:
                    terms.add(name)

        def sym(name: str) -> Symbol:
            return NonTerminal(name) if name in lhs_names else Terminal(name)

        prods = [Production(0, NonTerminal(AUG_START), (NonTerminal(start),))]
        for i, (lhs, rhs) in enumerate(rules, start=1):
            prods.append(Production(i, NonTerminal(lhs), tuple(sym(n) for n in rhs)))
        return cls(start, tuple(prods), frozenset(terms), frozenset(lhs_names | {AUG_START}))

    @classmethod
    def from_productions(cls, start: str, productions: Sequence[Production]) -> "Grammar":
        """이미 번호가 매겨진 프로덕션(증강 규칙 포함)으로 문법을 복원합니다."""
        prods = tuple(productions)
        for i, p in enumerate(prods):
            if p.rule_id != i:
                raise GrammarError(f"Production at index {i} has rule id {p.rule_id}")
        if not prods or prods[0].lhs.name != AUG_START or prods[0].rhs != (NonTerminal(start),):
            raise GrammarError(f"Rule 0 must be the augmented rule {AUG_START} -> {start}")
        terms = {EOF}
        nonterms = set()
        for p in prods:
            nonterms.add(p.lhs.name)
            for s in p.rhs:
                if isinstance(s, Terminal):
                    terms.add(s.name)
                else:
                    nonterms.add(s.name)
        return cls(start, prods, frozenset(terms), frozenset(nonterms))

    def __post_init__(self) -> None:
        by_lhs: Dict[str, List[int]] = {}
        for p in self.productions:
            by_lhs.setdefault(p.lhs.name, []).append(p.rule_id)
        self._by_lhs.update({k: tuple(v) for k, v in by_lhs.items()})

    # ----- 조회 -----
    def production(self, rule_id: int) -> Production:
        """규칙 번호로 프로덕션을 찾습니다. 범위를 벗어나면 IndexError."""
        if rule_id < 0:
            raise IndexError(rule_id)
        return self.productions[rule_id]

    def productions_of(self, lhs: str) -> Tuple[int, ...]:
        return self._by_lhs.get(lhs, ())

    def is_terminal(self, name: str) -> bool:
        return name in self.terminals

    def is_nonterminal(self, name: str) -> bool:
        return name in self.nonterminals

    def __len__(self) -> int:
        return len(self.productions)

    def __str__(self) -> str:
        return "\n".join(f"{p.rule_id:3d}: {p}" for p in self.productions)
