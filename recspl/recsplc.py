# recspl/recsplc.py
"""recsplc – recspl CLI

사용 예)
    $ python -m recspl.recsplc check -D --parser lalr
    $ python -m recspl.recsplc table -o build/recspl.table.json
    $ python -m recspl.recsplc lex examples/prog.txt
    $ python -m recspl.recsplc parse examples/prog.txt --table build/recspl.table.json --format sexpr

기능
----
- check : 문법(기본: RecSPL)을 읽어 FIRST/FOLLOW→(SLR|LALR) 테이블을 만들고 요약 출력
- table : 테이블을 JSON 아티팩트로 저장
- lex   : 원문을 토크나이즈해 토큰 스트림 출력
- parse : 원문을 렉싱→단말 변환→LR 파싱하여 트리 출력

디버그 모드(-D/--debug)를 켜면 문법/테이블 요약, parse에서는 오토마톤의 매 단계를
표준에러로 출력합니다.
"""

from __future__ import annotations
import argparse
import sys
from typing import Optional

from .errors import (
    GrammarConflictError, GrammarError, LexError, MalformedTableError,
    MalformedTerminalMapping, TableFormatError, TableLookupError,
)

# ------------------------------
# 헬퍼
# ------------------------------

def _eprint(*args, **kw) -> None:
    print(*args, file=sys.stderr, **kw)


def _read_source(args) -> str:
    if args.text is not None:
        return args.text
    with open(args.input, "r", encoding="utf-8") as f:
        return f.read()

# ------------------------------
# 파이프라인 로딩
# ------------------------------

def _load_tables(grammar_path: Optional[str], debug: bool, parser_kind: str):
    """
    문법(.bnf 파일 또는 내장 RecSPL)을 읽어 FIRST/FOLLOW→(SLR|LALR) 테이블까지 생성.
    parser_kind: 'slr' or 'lalr'
    """
    from .grammar import load_grammar, recspl_grammar
    from .lalr import compute_nullable_first_follow, build_slr_tables, build_lalr_tables

    g = load_grammar(grammar_path) if grammar_path else recspl_grammar()
    if debug: _eprint("[DEBUG] Grammar ready | terms=%d nonterms=%d rules=%d" %
                      (len(g.terminals), len(g.nonterminals), len(g.productions)))

    ff = compute_nullable_first_follow(g)
    if debug: _eprint("[DEBUG] FIRST/FOLLOW/NULLABLE computed")

    if parser_kind == "slr":
        tbl = build_slr_tables(g, ff)
    else:
        tbl = build_lalr_tables(g, ff)
    if debug: _eprint("[DEBUG] %s tables built | states=%d conflicts=%d" %
                      (parser_kind.upper(), tbl.n_states, len(tbl.conflicts)))
    return g, ff, tbl

# ------------------------------
# 디버그 출력 헬퍼
# ------------------------------

def _print_grammar_summary(g) -> None:
    _eprint("\n[Grammar]")
    _eprint(f"Start: {g.start}")
    _eprint("Terminals:")
    _eprint("  " + ", ".join(sorted(g.terminals)))
    _eprint("Nonterminals:")
    _eprint("  " + ", ".join(sorted(g.nonterminals)))
    _eprint("Productions:")
    _eprint(str(g))


def _print_tables_summary(tbl) -> None:
    _eprint("\n[Parsing Tables]")
    _eprint(f"States: {tbl.n_states}")
    _eprint(f"Conflicts: {len(tbl.conflicts)}")
    if tbl.conflicts:
        _eprint("\n[Conflicts Detail]")
        _eprint(tbl.pretty_conflicts())
    _eprint("\n[State 0 items]")
    if tbl.state_items:
        for line in tbl.state_items[tbl.start_state]:
            _eprint("  " + line)

# ------------------------------
# 커맨드 구현
# ------------------------------

def cmd_check(args) -> int:
    try:
        g, ff, tbl = _load_tables(args.file, debug=args.debug, parser_kind=args.parser)
    except (GrammarError, OSError) as e:
        _eprint("[GRAMMAR ERROR]", str(e))
        return 2

    if args.debug:
        _print_grammar_summary(g)
        _print_tables_summary(tbl)

    print(f"[CHECK OK] parser={args.parser} states={tbl.n_states} prods={len(g.productions)} "
          f"conflicts={len(tbl.conflicts)}")
    return 0 if not tbl.conflicts else 1


def cmd_table(args) -> int:
    from .lalr import dump_table
    try:
        g, ff, tbl = _load_tables(args.file, debug=args.debug, parser_kind=args.parser)
    except (GrammarError, OSError) as e:
        _eprint("[GRAMMAR ERROR]", str(e))
        return 2

    if tbl.conflicts:
        _eprint("[TABLE ERROR] Conflicts present; refusing to write a nondeterministic table.")
        _eprint(tbl.pretty_conflicts())
        return 2

    try:
        dump_table(tbl, args.output)
    except OSError as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2
    print(f"[EMIT] parser={args.parser} states={tbl.n_states} -> {args.output}")
    return 0


def cmd_lex(args) -> int:
    """원문을 토크나이즈해 결과를 표준출력으로 보여줍니다."""
    from .lex import RecsplLexer
    from .lex.adapter import TerminalMap
    try:
        text = _read_source(args)
        adapter = TerminalMap.for_recspl()
        for i, tok in enumerate(RecsplLexer().tokenize(text)):
            print(f"{i:03d}: {tok.type:<10} {adapter.terminal_of(tok.type):<7} {tok.text!r}  @{tok.line}:{tok.col}")
        return 0
    except LexError as e:
        _eprint("[LEX ERROR]", str(e))
        return 2
    except OSError as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2


def cmd_parse(args) -> int:
    from .lalr import load_table
    from .pipeline import Frontend, recspl_table
    from .syntax import to_indented, to_sexpr

    try:
        text = _read_source(args)
        table = load_table(args.table) if args.table else recspl_table(args.parser)
        if args.debug: _eprint(f"[DEBUG] table ready | states={table.n_states}")
        trace = (lambda step: _eprint(f"[DEBUG] {step}")) if args.debug else None
        root = Frontend(table).parse(text, trace=trace)
    except LexError as e:
        _eprint("[LEX ERROR]", str(e))
        return 2
    except TableLookupError as e:
        _eprint("[SYNTAX ERROR]")
        _eprint(str(e))
        return 2
    except (MalformedTableError, MalformedTerminalMapping, TableFormatError, GrammarConflictError) as e:
        _eprint("[TABLE ERROR]", type(e).__name__, str(e))
        return 2
    except OSError as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2

    if args.format == "sexpr":
        print(to_sexpr(root, lexemes=True, ids=args.ids))
    else:
        print(to_indented(root, ids=args.ids))
    return 0

# ------------------------------
# 엔트리포인트
# ------------------------------

def main(argv: Optional[list] = None) -> int:
    ap = argparse.ArgumentParser(prog="recsplc", description="RecSPL front end (LR parser) CLI")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_check = sub.add_parser("check", help="문법을 검사하고 테이블을 생성해 충돌 유무를 확인합니다")
    p_check.add_argument("file", nargs="?", help=".bnf 문법 파일 (생략 시 내장 RecSPL 문법)")
    p_check.add_argument("--parser", choices=["slr", "lalr"], default="lalr", help="파서 테이블 방식")
    p_check.add_argument("-D", "--debug", action="store_true", help="디버그 정보를 상세 출력")
    p_check.set_defaults(func=cmd_check)

    p_table = sub.add_parser("table", help="파싱 테이블을 JSON 아티팩트로 저장합니다")
    p_table.add_argument("file", nargs="?", help=".bnf 문법 파일 (생략 시 내장 RecSPL 문법)")
    p_table.add_argument("--parser", choices=["slr", "lalr"], default="lalr", help="파서 테이블 방식")
    p_table.add_argument("-o", "--output", required=True, help="출력 파일 경로")
    p_table.add_argument("-D", "--debug", action="store_true", help="디버그 정보를 상세 출력")
    p_table.set_defaults(func=cmd_table)

    p_lex = sub.add_parser("lex", help="RecSPL 원문을 토크나이즈합니다")
    src_group = p_lex.add_mutually_exclusive_group(required=True)
    src_group.add_argument("input", nargs="?", help="입력 원문 파일 경로")
    src_group.add_argument("--text", help="직접 입력 텍스트")
    p_lex.set_defaults(func=cmd_lex)

    p_parse = sub.add_parser("parse", help="RecSPL 원문을 파싱해 트리를 출력합니다")
    src_group = p_parse.add_mutually_exclusive_group(required=True)
    src_group.add_argument("input", nargs="?", help="입력 원문 파일 경로")
    src_group.add_argument("--text", help="직접 입력 텍스트")
    p_parse.add_argument("--table", help="JSON 테이블 아티팩트 (생략 시 문법에서 생성)")
    p_parse.add_argument("--parser", choices=["slr", "lalr"], default="lalr",
                         help="--table이 없을 때 생성할 테이블 방식")
    p_parse.add_argument("--format", choices=["indent", "sexpr"], default="indent", help="트리 출력 형식")
    p_parse.add_argument("--ids", action="store_true", help="노드 id를 함께 출력")
    p_parse.add_argument("-D", "--debug", action="store_true", help="오토마톤 단계를 표준에러로 출력")
    p_parse.set_defaults(func=cmd_parse)

    args = ap.parse_args(argv)
    return int(args.func(args))

if __name__ == "__main__":
    sys.exit(main())
