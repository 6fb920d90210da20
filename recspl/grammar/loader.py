"""(MVP) BNF 텍스트 문법 로더

형식
----
    # 주석
    %start PROG
    PROG     -> main GLOBVARS ALGO FUNCTIONS
    GLOBVARS -> ε
              | VTYP VNAME , GLOBVARS

- 한 줄에 하나의 `LHS -> 심볼...` 또는 이전 LHS에 이어지는 `| 심볼...`
- 빈 우변 또는 `ε`(혹은 `%empty`)는 ε-규칙
- 심볼은 공백으로 구분. 좌변으로 정의된 이름은 비단말, 나머지는 단말
- `%start` 가 없으면 첫 규칙의 좌변이 시작기호
"""

from __future__ import annotations
import regex as re
from pathlib    import Path
from typing     import List, Optional, Tuple

from .ast import Grammar
from ..errors import GrammarError

_RULE_RE = re.compile(r"^\s*(?P<lhs>[A-Za-z_][A-Za-z0-9_']*)\s*->(?P<rhs>.*)$")
_ALT_RE = re.compile(r"^\s*\|(?P<rhs>.*)$")
_START_RE = re.compile(r"^\s*%start\s+(?P<name>[A-Za-z_][A-Za-z0-9_']*)\s*$")
_EMPTY = {"ε", "%empty"}


def load_grammar_text(path: str) -> str:
    """
    Load Grammar Text
    """
    text = Path(path).read_text(encoding="utf-8")
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _split_alts(rhs: str, line_no: int) -> List[List[str]]:
    alts: List[List[str]] = []
    for part in rhs.split("|"):
        syms = part.split()
        if any(s in _EMPTY for s in syms):
            if len(syms) != 1:
                raise GrammarError(f"line {line_no}: 'ε' must stand alone in an alternative")
            syms = []
        alts.append(syms)
    return alts


def parse_bnf(src: str) -> Grammar:
    """BNF 텍스트를 Grammar로 변환합니다. 형식 오류는 GrammarError."""
    rules: List[Tuple[str, List[str]]] = []
    start: Optional[str] = None
    current: Optional[str] = None

    for line_no, raw in enumerate(src.split("\n"), start=1):
        line = raw.split("#", 1)[0]
        if not line.strip():
            continue

        m = _START_RE.match(line)
        if m:
            if start is not None:
                raise GrammarError(f"line {line_no}: duplicate %start")
            start = m.group("name")
            continue

        m = _RULE_RE.match(line)
        if m:
            current = m.group("lhs")
            for alt in _split_alts(m.group("rhs"), line_no):
                rules.append((current, alt))
            continue

        m = _ALT_RE.match(line)
        if m:
            if current is None:
                raise GrammarError(f"line {line_no}: alternative '|' before any rule")
            for alt in _split_alts(m.group("rhs"), line_no):
                rules.append((current, alt))
            continue

        raise GrammarError(f"line {line_no}: cannot parse {raw.strip()!r}")

    if not rules:
        raise GrammarError("Grammar has no productions")
    return Grammar.from_rules(start or rules[0][0], rules)


def load_grammar(path: str) -> Grammar:
    return parse_bnf(load_grammar_text(path))
