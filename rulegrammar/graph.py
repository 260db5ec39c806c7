"""
This module contains classes for compiling rules into grammar graphs.

A grammar graph is a directed graph of nodes stored in a list and addressed by
index. Token and tag nodes stand for single components; every other component is
represented by a pair of start and end nodes that enclose the subgraphs of its
children. A path from the start node to the final node is one way of speaking a
rule.
"""

import logging

from .components import (Alternatives, Count, Reference, Sequence, Tag, Token)
from .errors import GrammarError

logger = logging.getLogger(__name__)


class NodeKind:
    """
    Kinds of grammar graph nodes.
    """
    TOKEN = "TOKEN"
    TAG = "TAG"
    START_SEQUENCE = "START_SEQUENCE"
    END_SEQUENCE = "END_SEQUENCE"
    START_ALTERNATIVE = "START_ALTERNATIVE"
    END_ALTERNATIVE = "END_ALTERNATIVE"
    START_COUNT = "START_COUNT"
    END_COUNT = "END_COUNT"
    START_REFERENCE = "START_REFERENCE"
    END_REFERENCE = "END_REFERENCE"

    #: Maps each start kind to the end kind that closes it.
    closing_kinds = {
        START_SEQUENCE: END_SEQUENCE,
        START_ALTERNATIVE: END_ALTERNATIVE,
        START_COUNT: END_COUNT,
        START_REFERENCE: END_REFERENCE,
    }


class GrammarNode:
    """
    Node in a grammar graph.

    ``arcs`` is the list of indexes of the nodes that can follow this one, in the
    order in which they are tried during matching.
    """
    __slots__ = ("index", "kind", "component", "final", "arcs")

    def __init__(self, index, kind, component=None, final=False):
        self.index = index
        self.kind = kind
        self.component = component
        self.final = final
        self.arcs = []

    def __str__(self):
        return "%s(%d, %s, %s%s -> %s)" % (
            self.__class__.__name__, self.index, self.kind, self.component,
            ", final" if self.final else "", self.arcs
        )

    def __repr__(self):
        return self.__str__()


class GrammarGraph:
    """
    Arena of grammar nodes with a start node and a final node.
    """
    def __init__(self):
        self.nodes = []
        self.start = None
        self.end = None

    def add_node(self, kind, component=None, final=False):
        """
        Create a node and return its index.

        :param kind: NodeKind value
        :param component: RuleComponent the node stands for (default None)
        :param final: whether reaching the node ends a path (default False)
        :returns: int
        """
        index = len(self.nodes)
        self.nodes.append(GrammarNode(index, kind, component, final))
        return index

    def add_arc(self, source, target):
        """
        Add an arc between two nodes. Arcs are tried in the order they were
        added.

        :param source: int
        :param target: int
        """
        self.nodes[source].arcs.append(target)

    def __getitem__(self, index):
        return self.nodes[index]

    def __len__(self):
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    def __str__(self):
        return "%s(%d nodes, start=%s, end=%s)" % (
            self.__class__.__name__, len(self.nodes), self.start, self.end
        )

    def __repr__(self):
        return self.__str__()


class GraphBuilder:
    """
    Class for compiling the rules of a grammar into grammar graphs.

    Rule references are inlined. Unqualified references and qualified references
    to rules in the current grammar are resolved against the grammar containing
    the rule being compiled. Other qualified references are resolved through the
    grammar manager.

    Each grammar's committed rules are read once per builder, so every graph built
    by one builder sees the same version of a grammar, even if changes are
    committed in the meantime.
    """
    def __init__(self, grammar, manager=None):
        """
        :param grammar: RuleGrammar
        :param manager: GrammarManager for resolving references to other grammars
            (default: the grammar's manager)
        """
        self.grammar = grammar
        if manager is None:
            manager = getattr(grammar, "manager", None)
        self.manager = manager
        self._snapshots = {}
        self._inlining = []
        self._graph = None

        # Dispatch table. Convenience subclasses such as Optional are found
        # through the component type's method resolution order.
        self._builders = {
            Token: self._build_token,
            Tag: self._build_tag,
            Sequence: self._build_sequence,
            Alternatives: self._build_alternatives,
            Count: self._build_count,
            Reference: self._build_reference,
        }
        self.snapshot = self._pin(grammar)

    def _pin(self, grammar):
        snapshot = self._snapshots.get(grammar.name)
        if snapshot is None:
            snapshot = grammar.snapshot
            self._snapshots[grammar.name] = snapshot
        return snapshot

    def build(self, rule_name):
        """
        Compile a rule of this builder's grammar into a grammar graph.

        :param rule_name: str
        :returns: GrammarGraph
        :raises: GrammarError, CompilationError
        """
        rule = self.snapshot.get_rule(rule_name)
        if rule is None:
            raise GrammarError("rule %r was not found in grammar %r"
                               % (rule_name, self.grammar.name))

        self._graph = graph = GrammarGraph()
        graph.start = graph.add_node(NodeKind.START_REFERENCE,
                                     Reference(rule_name))
        self._inlining = [(self.grammar.name, rule_name)]
        try:
            body_start, body_end = self._build(rule.component, self.grammar)
        finally:
            self._inlining = []
            self._graph = None
        graph.end = graph.add_node(NodeKind.END_REFERENCE, final=True)
        graph.add_arc(graph.start, body_start)
        graph.add_arc(body_end, graph.end)

        logger.debug("built graph for rule %r in grammar %r with %d nodes",
                     rule_name, self.grammar.name, len(graph))
        return graph

    def _build(self, component, grammar):
        for cls in type(component).__mro__:
            builder = self._builders.get(cls)
            if builder is not None:
                return builder(component, grammar)
        raise TypeError("cannot compile component %r of type %s"
                        % (component, type(component).__name__))

    def _build_token(self, token, grammar):
        token.validate_compilable()
        node = self._graph.add_node(NodeKind.TOKEN, token)
        return node, node

    def _build_tag(self, tag, grammar):
        node = self._graph.add_node(NodeKind.TAG, tag)
        return node, node

    def _build_sequence(self, sequence, grammar):
        graph = self._graph
        start = graph.add_node(NodeKind.START_SEQUENCE, sequence)
        end = graph.add_node(NodeKind.END_SEQUENCE)

        # Connect each child serially.
        last = start
        for child in sequence.children:
            child_start, child_end = self._build(child, grammar)
            graph.add_arc(last, child_start)
            last = child_end
        graph.add_arc(last, end)
        return start, end

    def _build_alternatives(self, alternatives, grammar):
        graph = self._graph
        start = graph.add_node(NodeKind.START_ALTERNATIVE, alternatives)
        end = graph.add_node(NodeKind.END_ALTERNATIVE)

        # Connect each child in parallel. Weights are not used.
        for child in alternatives.children:
            child_start, child_end = self._build(child, grammar)
            graph.add_arc(start, child_start)
            graph.add_arc(child_end, end)
        return start, end

    def _build_count(self, count, grammar):
        graph = self._graph
        start = graph.add_node(NodeKind.START_COUNT, count)
        end = graph.add_node(NodeKind.END_COUNT)
        low, high = count.min_repeat, count.max_repeat

        if high == 0:
            graph.add_arc(start, end)
            return start, end

        first_start, last_end = self._build(count.child, grammar)
        last_start = first_start
        copies = 1

        # Mandatory copies.
        while copies < low:
            copy_start, copy_end = self._build(count.child, grammar)
            graph.add_arc(last_end, copy_start)
            last_start, last_end = copy_start, copy_end
            copies += 1

        # Optional copies, each of which can be skipped by jumping to the end.
        bypassed = []
        if not count.indefinite:
            while copies < high:
                copy_start, copy_end = self._build(count.child, grammar)
                graph.add_arc(last_end, copy_start)
                bypassed.append(last_end)
                last_start, last_end = copy_start, copy_end
                copies += 1
        for node in bypassed:
            graph.add_arc(node, end)

        graph.add_arc(start, first_start)
        graph.add_arc(last_end, end)
        if low == 0:
            graph.add_arc(start, end)
        if count.indefinite:
            graph.add_arc(last_end, last_start)
        return start, end

    def _build_reference(self, reference, grammar):
        target, rule = self._resolve(reference, grammar)
        key = (target.name, rule.name)
        if key in self._inlining:
            chain = " -> ".join(["%s.%s" % k for k in self._inlining + [key]])
            raise GrammarError("rule %r in grammar %r references itself: %s"
                               % (rule.name, target.name, chain))

        graph = self._graph
        start = graph.add_node(NodeKind.START_REFERENCE, reference)
        end = graph.add_node(NodeKind.END_REFERENCE)
        self._inlining.append(key)
        try:
            body_start, body_end = self._build(rule.component, target)
        finally:
            self._inlining.pop()
        graph.add_arc(start, body_start)
        graph.add_arc(body_end, end)
        return start, end

    def _resolve(self, reference, grammar):
        # Look in the current grammar first.
        rule = self._pin(grammar).get_rule(reference.rule_name)
        if rule is not None:
            return grammar, rule

        grammar_reference = reference.grammar_reference
        if not grammar_reference or grammar_reference == grammar.name:
            raise GrammarError("unknown rule name %r referenced in grammar %r"
                               % (reference.rule_name, grammar.name))

        if self.manager is None:
            raise GrammarError("cannot resolve reference %r without a grammar "
                               "manager" % reference.qualified_name)
        target = self.manager.get_grammar(grammar_reference)
        if target is None:
            raise GrammarError("unknown grammar %r referenced in grammar %r"
                               % (grammar_reference, grammar.name))
        rule = self._pin(target).get_rule(reference.rule_name)
        if rule is None:
            raise GrammarError("unknown rule name %r in grammar %r"
                               % (reference.rule_name, grammar_reference))
        return target, rule
