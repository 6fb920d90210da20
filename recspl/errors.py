# recspl/errors.py
"""recspl 진단(diagnostic) 예외 모음.

분류
----
- TableLookupError        : ACTION 칸이 비어 있음 → 일반적인 **구문 오류**
- MalformedTableError     : 입력과 무관한 테이블 불량(accept 시 노드 수 불일치 등)
- TableGotoError          : reduce 직후 GOTO 칸이 비어 있음 → **테이블 불량** (MalformedTableError 하위)
- MalformedTerminalMapping: 토큰 클래스 → 단말 매핑 누락 → **설정 오류**
- LexError                : 렉서가 인식할 수 없는 문자
- GrammarError            : BNF 텍스트/문법 구성 오류
- TableFormatError        : 테이블 아티팩트(JSON) 구조 오류
- GrammarConflictError    : strict 모드 테이블 생성에서 충돌 발견

모든 오류는 현재 파싱(또는 로딩)만 중단시키며, 복구/재시도는 하지 않습니다.
"""

from __future__ import annotations
from typing import FrozenSet, Iterable, Optional, Tuple


def _line_bounds(src: str, pos: int) -> Tuple[int, int]:
    """pos가 속한 라인의 [start, end) 범위를 반환."""
    start = src.rfind("\n", 0, pos)
    start = 0 if start < 0 else start + 1
    end = src.find("\n", pos)
    end = len(src) if end < 0 else end
    return start, end


def caret_snippet(src: str, pos: int) -> str:
    """해당 절대 오프셋 pos에 캐럿(^)을 찍은 스니펫을 생성."""
    start, end = _line_bounds(src, pos)
    line = src[start:end]
    col = (pos - start) + 1
    caret = " " * (col - 1) + "^"
    return f"{line}\n{caret}"


class TableLookupError(SyntaxError):
    """ACTION[state][terminal]이 없는 경우(구문 오류).

    Attributes
    ----------
    state : int
        오류가 난 시점의 스택 최상단 상태.
    offending : str
        현재 lookahead 단말 이름(EOF면 '$').
    expected : FrozenSet[str]
        해당 상태 ACTION 행의 단말 집합.
    lexeme, line, col :
        원문 정보를 알 때만 채워집니다.
    """

    def __init__(self,
                 state: int,
                 offending: str,
                 expected: Iterable[str],
                 *,
                 lexeme: Optional[str] = None,
                 line: Optional[int] = None,
                 col: Optional[int] = None,
                 snippet: Optional[str] = None):
        self.state = state
        self.offending = offending
        self.expected: FrozenSet[str] = frozenset(expected)
        self.lexeme = lexeme
        self.line = line
        self.col = col
        expected_sorted = ", ".join(sorted(self.expected))
        if offending == "$":
            where = "EOF"
            what = ""
        else:
            where = f"{line}:{col}" if line is not None else f"state {state}"
            what = f" unexpected {offending!r}"
            if lexeme is not None and lexeme != offending:
                what += f" ({lexeme!r})"
            what += ","
        msg = f"Parse error at {where}:{what} expected one of {{{expected_sorted}}}"
        if snippet:
            msg += "\n" + snippet
        super().__init__(msg)


class MalformedTableError(RuntimeError):
    """테이블 자체가 입력과 무관하게 잘못된 경우(잘못된 프로그램이 아니라 잘못된 설정)."""


class TableGotoError(MalformedTableError):
    """reduce 직후 GOTO[state][lhs]가 없는 경우(테이블 일관성 문제)."""

    def __init__(self, state: int, lhs: str, rule_id: int, *, reason: Optional[str] = None):
        self.state = state
        self.lhs = lhs
        self.rule_id = rule_id
        msg = f"GOTO missing for state={state}, lhs={lhs} (after reduce by rule {rule_id})"
        if reason:
            msg = f"{reason} (state={state}, lhs={lhs}, rule {rule_id})"
        super().__init__(msg)


class MalformedTerminalMapping(LookupError):
    """토큰 클래스를 단말로 옮길 수 없을 때."""

    def __init__(self, token_class: str, *, line: Optional[int] = None, col: Optional[int] = None,
                 detail: Optional[str] = None):
        self.token_class = token_class
        self.line = line
        self.col = col
        msg = detail or f"No terminal mapped for token class {token_class!r}"
        if line is not None:
            msg += f" at {line}:{col}"
        super().__init__(msg)


class LexError(SyntaxError):
    """렉서가 인식할 수 없는 문자를 만났을 때."""

    def __init__(self, message: str, *, line: int, col: int):
        self.line = line
        self.col = col
        super().__init__(message)


class GrammarError(ValueError):
    pass


class TableFormatError(ValueError):
    pass


class GrammarConflictError(ValueError):
    """strict 모드에서 생성된 테이블에 충돌이 남아 있을 때."""

    def __init__(self, report: str):
        self.report = report
        super().__init__("Grammar is not conflict-free:\n" + report)
