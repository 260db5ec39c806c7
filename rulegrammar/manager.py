"""
This module contains the ``GrammarManager`` class, which owns a set of named rule
grammars and resolves qualified rule references between them.
"""

import logging
import threading

from .grammars import RuleGrammar
from .matcher import match, match_all
from .parser import parse_grammar_file, parse_grammar_string

logger = logging.getLogger(__name__)


class GrammarManager:
    """
    Registry of rule grammars, keyed by grammar reference.

    Grammars created or loaded through a manager use it to resolve qualified rule
    references, such as ``<com.example.numbers.digit>``, to rules in other
    grammars of the same manager.
    """
    #: Class used to create grammars.
    grammar_class = RuleGrammar

    def __init__(self):
        self._grammars = {}
        self._lock = threading.Lock()

    def _register(self, grammar):
        with self._lock:
            if grammar.name in self._grammars:
                raise ValueError("a grammar with reference %r already exists"
                                 % grammar.name)
            self._grammars[grammar.name] = grammar
        grammar.manager = self
        logger.debug("registered grammar %r", grammar.name)
        return grammar

    def create_grammar(self, reference, root=None, locale=None):
        """
        Create an empty grammar and register it with this manager.

        If ``root`` is given, setting it as the root rule is queued; it takes
        effect when the grammar's changes are committed.

        :param reference: grammar reference
        :param root: root rule name (default None)
        :param locale: str | None
        :returns: RuleGrammar
        :raises: ValueError, GrammarError
        """
        if reference in self:
            raise ValueError("a grammar with reference %r already exists"
                             % reference)
        grammar = self.grammar_class(reference, locale)
        if root is not None:
            grammar.set_root(root)
        return self._register(grammar)

    def load_grammar(self, reference, text):
        """
        Parse grammar text, commit its rules to a new grammar and register the
        grammar with this manager.

        The grammar's root rule is the one declared in the text, if any, and is
        enabled for matching.

        :param reference: grammar reference, or None to use the name declared in
            the text
        :param text: str
        :returns: RuleGrammar
        :raises: ParseException, GrammarError, ValueError
        """
        rules, attributes = parse_grammar_string(text)
        return self._load(reference, rules, attributes)

    def load_grammar_file(self, reference, path):
        """
        Like ``load_grammar``, but read the grammar text from a file.

        :param reference: grammar reference or None
        :param path: str
        :returns: RuleGrammar
        :raises: ParseException, GrammarError, ValueError
        """
        rules, attributes = parse_grammar_file(path)
        return self._load(reference, rules, attributes)

    def _load(self, reference, rules, attributes):
        if reference is None:
            reference = attributes["name"]
        if reference in self:
            raise ValueError("a grammar with reference %r already exists"
                             % reference)

        grammar = self.grammar_class(reference, attributes["xml:lang"])
        grammar.set_attribute("version", attributes["version"])
        grammar.add_rules(*rules)
        root = attributes.get("root")
        if root is not None:
            grammar.set_root(root)
            grammar.set_activatable(root, True)
        grammar.commit_changes()
        logger.debug("loaded %d rule(s) into grammar %r", len(rules), reference)
        return self._register(grammar)

    def get_grammar(self, reference):
        """
        Get a registered grammar.

        :param reference: grammar reference
        :returns: RuleGrammar | None
        """
        with self._lock:
            return self._grammars.get(reference)

    def delete_grammar(self, grammar):
        """
        Remove a grammar from this manager.

        :param grammar: RuleGrammar or grammar reference
        :raises: ValueError
        """
        reference = grammar.name if isinstance(grammar, RuleGrammar) else grammar
        with self._lock:
            removed = self._grammars.pop(reference, None)
        if removed is None:
            raise ValueError("grammar %r is not known to this manager"
                             % reference)
        removed.manager = None
        logger.debug("deleted grammar %r", reference)

    @property
    def grammars(self):
        """
        The registered grammars, in registration order.

        :returns: list
        """
        with self._lock:
            return list(self._grammars.values())

    def match(self, reference, tokens, rule_name=None, **kwargs):
        """
        Match words against a rule of a registered grammar and return the first
        parse, or None.

        :param reference: grammar reference
        :param tokens: list of words or a string
        :param rule_name: str | None
        :returns: RuleParse | None
        :raises: ValueError, GrammarError
        """
        return match(self._lookup(reference), tokens, rule_name, self, **kwargs)

    def match_all(self, reference, tokens, rule_name=None, **kwargs):
        """
        Like ``match``, but return a list of every parse.

        :returns: list
        """
        return match_all(self._lookup(reference), tokens, rule_name, self,
                         **kwargs)

    def _lookup(self, reference):
        grammar = self.get_grammar(reference)
        if grammar is None:
            raise ValueError("grammar %r is not known to this manager"
                             % reference)
        return grammar

    def __contains__(self, reference):
        with self._lock:
            return reference in self._grammars

    def __len__(self):
        with self._lock:
            return len(self._grammars)

    def __str__(self):
        return "%s(%s)" % (self.__class__.__name__,
                           [g.name for g in self.grammars])

    def __repr__(self):
        return self.__str__()
