from __future__ import annotations

import copy
import json
from pathlib import Path

import pytest

from recspl.grammar import Grammar, recspl_grammar
from recspl.lalr import ParseTable, load_table
from recspl.pipeline import recspl_table

FIXTURES = Path(__file__).parent / "fixtures"
TOY_TABLE = FIXTURES / "toy_table.json"

RECSPL_PROGRAM = """\
main
num V_x ,
text V_s ,
begin
  V_x < input ;
  V_x = add ( V_x , 1 ) ;
  V_s = "hi" ;
  if grt ( V_x , 10 ) then begin print V_x ; end else begin skip ; end ;
  V_x = F_inc ( V_x , 0 , 0 ) ;
  halt ;
end
num F_inc ( V_a , V_b , V_c )
{
  num V_r , num V_t , num V_u ,
  begin
    V_r = add ( V_a , 1 ) ;
    return V_r ;
  end
}
end
"""


@pytest.fixture
def toy_dict() -> dict:
    return copy.deepcopy(json.loads(TOY_TABLE.read_text(encoding="utf-8")))


@pytest.fixture
def toy_table() -> ParseTable:
    return load_table(TOY_TABLE)


@pytest.fixture
def toy_grammar() -> Grammar:
    # S -> a S b | ε
    return Grammar.from_rules("S", [("S", ["a", "S", "b"]), ("S", [])])


@pytest.fixture
def chain_grammar() -> Grammar:
    # A -> B, B -> C, C -> x : 단위 규칙 3단 체인
    return Grammar.from_rules("A", [("A", ["B"]), ("B", ["C"]), ("C", ["x"])])


@pytest.fixture(scope="session")
def recspl_lalr() -> ParseTable:
    return recspl_table("lalr")


@pytest.fixture(scope="session")
def recspl_slr() -> ParseTable:
    return recspl_table("slr")


@pytest.fixture(scope="session")
def recspl_program() -> str:
    return RECSPL_PROGRAM


@pytest.fixture(scope="session")
def grammar() -> Grammar:
    return recspl_grammar()
