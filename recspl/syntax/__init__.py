from .nodes import Leaf, Internal, Node, walk, leaves, node_ids
from .builder import NodeIds, TreeBuilder
from .render import to_sexpr, to_indented
