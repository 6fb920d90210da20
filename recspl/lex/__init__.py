# recspl/lex/__init__.py
"""RecSPL 토크나이저(runtime).

특징
----
- 공백(스페이스/탭/개행)은 스킵하며 줄/칸 위치만 갱신
- 단어(`[A-Za-z_][A-Za-z0-9_]*`)는 통째로 읽은 뒤 분류
  1) 키워드 → 키워드 클래스 (예: "main" → MAIN, "num" → NUM)
  2) `V_[a-z][a-z0-9]*` → VAR, `F_[a-z][a-z0-9]*` → FUNC
  3) 그 외 → LexError (단어 경계가 자연히 보장됨: "mainx"는 키워드가 아님)
- 숫자 `-?[0-9]+(\\.[0-9]+)?` → NUMBER, 텍스트 `"[^"]*"` → STRING
- 구두점/연산자: = < ( ) ; , { }

산출 토큰의 `type` 은 **토큰 클래스 이름**입니다. 파서 단말로의 변환은
`recspl.lex.adapter.TerminalMap` 이 담당합니다.

API
---
- `LexTok(type, text, line, col, pos)`: 토큰 단위
- `Lexer` 프로토콜: `peek()`, `next()`
- `RecsplLexer().tokenize(text) -> List[LexTok]`
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional
import regex as re

from ..errors import LexError

KEYWORDS: Dict[str, str] = {
    kw: kw.upper() for kw in (
        "main", "begin", "end", "num", "text", "void",
        "skip", "halt", "print", "return", "input",
        "if", "then", "else",
        "not", "sqrt", "or", "and", "eq", "grt", "add", "sub", "mul", "div",
    )
}

PUNCT: Dict[str, str] = {
    "=": "ASSIGN",
    "<": "LESS",
    "(": "LPAREN",
    ")": "RPAREN",
    ";": "SEMICOLON",
    ",": "COMMA",
    "{": "LBRACE",
    "}": "RBRACE",
}

TOKEN_CLASSES: FrozenSet[str] = frozenset(
    set(KEYWORDS.values()) | set(PUNCT.values()) | {"VAR", "FUNC", "NUMBER", "STRING"}
)

_TOKEN_SPEC = [
    ("WS",     r"[ \t\f\r]+"),
    ("NEWLINE", r"\n"),
    ("NUMBER", r"-?[0-9]+(?:\.[0-9]+)?"),
    ("STRING", r'"[^"\n]*"'),
    ("WORD",   r"[A-Za-z_][A-Za-z0-9_]*"),
    ("PUNCT",  r"[=<();,{}]"),
]
MASTER_RE = re.compile("|".join(f"(?P<{n}>{p})" for n, p in _TOKEN_SPEC))
_VAR_RE = re.compile(r"V_[a-z][a-z0-9]*")
_FUNC_RE = re.compile(r"F_[a-z][a-z0-9]*")


# --------- Public datatypes ---------

@dataclass(frozen=True)
class LexTok:
    type: str   # 토큰 클래스 이름 (예: "VAR", "MAIN", "SEMICOLON")
    text: str   # 원문 lexeme
    line: int   # 1-based
    col: int    # 1-based
    pos: int = 0  # 절대 오프셋


class Lexer:
    """런타임이 기대하는 최소 인터페이스."""
    token_classes: FrozenSet[str] = frozenset()

    def peek(self) -> Optional[LexTok]:
        raise NotImplementedError

    def next(self) -> Optional[LexTok]:
        raise NotImplementedError


# --------- Core implementation ---------

def _classify_word(word: str, line: int, col: int) -> str:
    kind = KEYWORDS.get(word)
    if kind is not None:
        return kind
    if _VAR_RE.fullmatch(word):
        return "VAR"
    if _FUNC_RE.fullmatch(word):
        return "FUNC"
    raise LexError(
        f"Lexing error: {word!r} at {line}:{col} is neither a keyword nor a V_/F_ name",
        line=line, col=col,
    )


class RecsplLexer(Lexer):
    """
    RecsplLexer
    ===========
    RecSPL 참조 렉서. 입력 끝에서는 None(=EOF)을 돌려줍니다.
    """
    token_classes = TOKEN_CLASSES

    def __init__(self, text: str = ""):
        self.reset(text)

    # ---- Input binding ----
    def reset(self, text: str, *, line: int = 1, col: int = 1) -> None:
        self._text = text
        self._i = 0
        self._line = line
        self._col = col
        self._peek_cache: Optional[LexTok] = None

    # ---- Public API ----
    def peek(self) -> Optional[LexTok]:
        if self._peek_cache is None:
            self._peek_cache = self._next_token()
        return self._peek_cache

    def next(self) -> Optional[LexTok]:
        if self._peek_cache is not None:
            t = self._peek_cache
            self._peek_cache = None
            return t
        return self._next_token()

    def tokenize(self, text: str) -> List[LexTok]:
        """text 전체를 토큰 리스트로. EOF 토큰은 넣지 않습니다."""
        self.reset(text)
        out: List[LexTok] = []
        while True:
            tok = self.next()
            if tok is None:
                return out
            out.append(tok)

    def __iter__(self):
        while True:
            tok = self.next()
            if tok is None:
                return
            yield tok

    # ---- Internals ----
    def _next_token(self) -> Optional[LexTok]:
        while self._i < len(self._text):
            m = MASTER_RE.match(self._text, self._i)
            if not m:
                ch = self._text[self._i]
                raise LexError(
                    f"Lexing error: unexpected character {ch!r} at {self._line}:{self._col}",
                    line=self._line, col=self._col,
                )
            kind = m.lastgroup or ""
            lex = m.group(0)
            line, col, pos = self._line, self._col, self._i

            # 위치 갱신
            self._i = m.end()
            if kind == "NEWLINE":
                self._line += 1
                self._col = 1
                continue
            self._col += len(lex)
            if kind == "WS":
                continue

            if kind == "WORD":
                kind = _classify_word(lex, line, col)
            elif kind == "PUNCT":
                kind = PUNCT[lex]
            return LexTok(type=kind, text=lex, line=line, col=col, pos=pos)
        return None


# Convenience
def tokenize(text: str) -> List[LexTok]:
    return RecsplLexer().tokenize(text)
