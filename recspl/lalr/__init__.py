from .table import (
    ParseTable, Action, Shift, Reduce, Accept, Error, ACCEPT, ERROR,
    encode_action, decode_action, load_table, dump_table,
)
from .first_follow import FFResult, compute_nullable_first_follow
from .items import build_slr_tables, build_lalr_tables, build_tables
from .runtime import LRParser, Step, parse_terminals
