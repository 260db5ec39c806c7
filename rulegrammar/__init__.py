"""
This package contains classes and functions for defining grammar rules, managing
them in transactional rule grammars, compiling them into grammar graphs and
matching spoken words against them.
"""
from .errors import CommitError
from .errors import CompilationError
from .errors import GrammarError

from .components import Alternatives
from .components import Count
from .components import filter_component
from .components import find_component
from .components import flat_map_component
from .components import KleeneStar
from .components import map_component
from .components import Optional
from .components import Reference
from .components import Repeat
from .components import REPEAT_INDEFINITELY
from .components import RuleComponent
from .components import RuleParse
from .components import Sequence
from .components import Tag
from .components import Token
from .components import TraversalOrder

from .grammars import GrammarSnapshot
from .grammars import InternalRule
from .grammars import RuleGrammar

from .graph import GrammarGraph
from .graph import GrammarNode
from .graph import GraphBuilder
from .graph import NodeKind

from .manager import GrammarManager

from .matcher import match, match_all
from .matcher import TokenMatcher

from .parser import parse_grammar_string, parse_grammar_file, valid_grammar
from .parser import parse_component_string, parse_rule_string

from .references import BaseRef

from .rules import PRIVATE
from .rules import PrivateRule
from .rules import PUBLIC
from .rules import PublicRule
from .rules import Rule
