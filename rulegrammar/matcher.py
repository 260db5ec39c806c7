"""
This module contains the token matcher, which finds a path through a grammar graph
that speaks a list of words and reconstructs the matched components along it.
"""

import logging

from .components import (Alternatives, Count, RuleParse, Sequence, Tag, Token)
from .errors import GrammarError
from .graph import GraphBuilder, GrammarNode, NodeKind

logger = logging.getLogger(__name__)


class _StepLimitReached(Exception):
    pass


def split_tokens(tokens):
    """
    Return a list of words. Strings are split on whitespace.

    :param tokens: str | list
    :returns: list
    """
    if isinstance(tokens, str):
        return tokens.split()
    return list(tokens)


class TokenMatcher:
    """
    Depth-first, backtracking matcher for grammar graphs.

    The outgoing arcs of each node are tried in order and the first path that
    reaches the final node with every word consumed is the match. Words are
    compared case-insensitively. An input word equal to one of the ``wildcards``
    matches any single rule word.

    The search keeps the current path on an explicit stack, so the length of the
    input is not limited by the interpreter's recursion limit. The components
    matched along the successful path are then folded into a ``RuleParse``.
    """

    #: Input words that match any rule word.
    wildcards = ("%", "*")

    #: Maximum number of node visits per match, or None for no limit.
    max_steps = None

    def __init__(self, graph, wildcards=None, max_steps=None):
        """
        :param graph: GrammarGraph
        :param wildcards: sequence of wildcard words (default: ``wildcards``)
        :param max_steps: int | None (default: ``max_steps``)
        """
        self.graph = graph
        if wildcards is not None:
            self.wildcards = tuple(wildcards)
        if max_steps is not None:
            self.max_steps = max_steps
        self._folders = {
            NodeKind.START_SEQUENCE: self._fold_sequence,
            NodeKind.START_ALTERNATIVE: self._fold_alternative,
            NodeKind.START_COUNT: self._fold_count,
            NodeKind.START_REFERENCE: self._fold_reference,
        }

    def match(self, tokens):
        """
        Match a list of words against the graph.

        :param tokens: list of words or a string
        :returns: RuleParse | None
        """
        tokens = split_tokens(tokens)
        try:
            path = self._search(tokens)
        except _StepLimitReached:
            logger.warning("gave up matching %r after %d steps", tokens,
                           self.max_steps)
            return None

        if path is None:
            return None
        return self._fold_path(path)

    def _search(self, tokens):
        # Each frame is [node index, entry position, exit position, next arc].
        # A node reached again at the same position without consuming any words
        # can only repeat the search that is already in progress, so such
        # revisits are pruned.
        graph = self.graph
        steps = 0
        frames = []
        on_path = set()
        pending = [(graph.start, 0)]

        while pending or frames:
            if pending:
                index, position = pending.pop()
                steps += 1
                if self.max_steps is not None and steps > self.max_steps:
                    raise _StepLimitReached()

                state = (index, position)
                node = graph[index]
                if state in on_path:
                    continue
                if node.final:
                    if position == len(tokens):
                        return [f[0] for f in frames] + [index]
                    continue

                end = position
                if node.kind == NodeKind.TOKEN:
                    end = self._match_words(node.component.words, tokens,
                                            position)
                    if end is None:
                        continue
                frames.append([index, position, end, 0])
                on_path.add(state)
                continue

            # Try the next arc of the deepest node, or backtrack out of it.
            frame = frames[-1]
            arcs = graph[frame[0]].arcs
            if frame[3] < len(arcs):
                pending.append((arcs[frame[3]], frame[2]))
                frame[3] += 1
            else:
                frames.pop()
                on_path.discard((frame[0], frame[1]))
        return None

    def _match_words(self, words, tokens, position):
        end = position + len(words)
        if end > len(tokens):
            return None

        for word, given in zip(words, tokens[position:end]):
            if given not in self.wildcards and \
                    given.casefold() != word.casefold():
                return None
        return end

    def _fold_path(self, path):
        # Start nodes are pushed as markers; each end node pops the components
        # above its start marker and pushes the folded component.
        graph = self.graph
        stack = []
        for index in path:
            node = graph[index]
            if node.kind == NodeKind.TOKEN:
                stack.append(Token(node.component.text))
            elif node.kind == NodeKind.TAG:
                stack.append(Tag(node.component.value))
            elif node.kind in NodeKind.closing_kinds:
                stack.append(node)
            else:
                start, fragments = self._pop_fragments(stack, node)
                stack.append(self._folders[start.kind](start, fragments))
        return stack.pop()

    @staticmethod
    def _pop_fragments(stack, end):
        fragments = []
        while stack:
            top = stack.pop()
            if isinstance(top, GrammarNode):
                if NodeKind.closing_kinds[top.kind] != end.kind:
                    break
                fragments.reverse()
                return top, fragments
            fragments.append(top)
        raise RuntimeError("no start marker for node %s" % end)

    def _fold_sequence(self, node, fragments):
        return Sequence(*fragments)

    def _fold_alternative(self, node, fragments):
        return Alternatives(*fragments)

    def _fold_count(self, node, fragments):
        count = node.component
        repeats = len(fragments)
        return Count(Sequence(*fragments), repeats, repeats,
                     count.repeat_probability)

    def _fold_reference(self, node, fragments):
        if len(fragments) == 1:
            parse = fragments[0]
        else:
            parse = Sequence(*fragments)
        return RuleParse(node.component, parse)


def _candidate_rule_names(builder, rule_name):
    snapshot = builder.snapshot
    if rule_name is not None:
        if snapshot.get_rule(rule_name) is None:
            raise GrammarError("unknown rule name %r for grammar %r"
                               % (rule_name, builder.grammar.name))
        return [rule_name]

    root = snapshot.resolve_root()
    if root is None:
        raise GrammarError("grammar %r has no root rule to match against"
                           % builder.grammar.name)

    # An explicit root that has been deactivated is not a candidate.
    names = [r.name for r in snapshot.activatable_rules]
    if root in names:
        names.remove(root)
        names.insert(0, root)
    return names


def _parses(grammar, tokens, rule_name, manager, wildcards, max_steps):
    tokens = split_tokens(tokens)
    builder = GraphBuilder(grammar, manager)
    for name in _candidate_rule_names(builder, rule_name):
        graph = builder.build(name)
        parse = TokenMatcher(graph, wildcards, max_steps).match(tokens)
        logger.debug("matching %r against rule %r in grammar %r: %s", tokens,
                     name, grammar.name,
                     "no match" if parse is None else "matched")
        if parse is not None:
            yield parse


def match(grammar, tokens, rule_name=None, manager=None, wildcards=None,
          max_steps=None):
    """
    Match words against a rule and return the first parse, or None.

    If ``rule_name`` is None, the grammar's activatable *PUBLIC* rules are tried
    in insertion order, starting with the root rule if it is activatable.

    :param grammar: RuleGrammar
    :param tokens: list of words or a string
    :param rule_name: str | None
    :param manager: GrammarManager for references to other grammars
    :param wildcards: sequence of wildcard words
    :param max_steps: int | None
    :returns: RuleParse | None
    :raises: GrammarError, CompilationError
    """
    return next(_parses(grammar, tokens, rule_name, manager, wildcards,
                        max_steps), None)


def match_all(grammar, tokens, rule_name=None, manager=None, wildcards=None,
              max_steps=None):
    """
    Like ``match``, but return a list with the parse of every candidate rule that
    matches.

    :returns: list
    """
    return list(_parses(grammar, tokens, rule_name, manager, wildcards,
                        max_steps))
