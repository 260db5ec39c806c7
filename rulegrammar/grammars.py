"""
This module contains the transactional rule grammar container.

Changes to a ``RuleGrammar`` are queued and take effect when
``commit_changes`` is called. Each commit publishes a new immutable snapshot of
the grammar's rules; readers, such as graph builders, use one snapshot for as
long as they need a consistent view of the grammar.
"""

import itertools
import logging
import threading
from types import MappingProxyType

from . import references
from .errors import CommitError, GrammarError
from .matcher import match, match_all
from .rules import Rule

logger = logging.getLogger(__name__)


class InternalRule:
    """
    Grammar-owned wrapper for a rule and its insertion ID and activation state.

    Internal rules are shared between snapshots and are never modified; changing
    a rule's activation creates a new internal rule.
    """
    def __init__(self, rule, insertion_id, activatable=True):
        self._rule = rule
        self._insertion_id = insertion_id
        self._activatable = activatable

    @property
    def rule(self):
        return self._rule

    @property
    def name(self):
        return self._rule.name

    @property
    def insertion_id(self):
        return self._insertion_id

    @property
    def activatable(self):
        return self._activatable

    @property
    def visible(self):
        return self._rule.visible

    def with_activatable(self, activatable):
        """
        Return a copy of this internal rule with a different activation state.

        :param activatable: bool
        :returns: InternalRule
        """
        return InternalRule(self._rule, self._insertion_id, activatable)

    def __str__(self):
        return "%s(%s, id=%d, activatable=%s)" % (
            self.__class__.__name__, self._rule, self._insertion_id,
            self._activatable
        )

    def __repr__(self):
        return self.__str__()


class GrammarSnapshot:
    """
    Immutable view of a grammar's committed rules and explicit root rule name.
    """
    def __init__(self, rules, root=None):
        self._rules = MappingProxyType(dict(rules))
        self._root = root

    @property
    def rules(self):
        """
        Read-only mapping of rule names to ``InternalRule`` objects.

        :returns: mapping
        """
        return self._rules

    @property
    def explicit_root(self):
        """
        The root rule name set with ``set_root``, or None.

        :returns: str | None
        """
        return self._root

    def get_rule(self, name):
        internal = self._rules.get(name)
        return internal.rule if internal is not None else None

    @property
    def ordered_rules(self):
        """
        The internal rules in insertion order.

        :returns: list
        """
        return sorted(self._rules.values(), key=lambda r: r.insertion_id)

    @property
    def activatable_rules(self):
        """
        The PUBLIC, activatable internal rules in insertion order.

        :returns: list
        """
        return [r for r in self.ordered_rules if r.visible and r.activatable]

    def resolve_root(self):
        """
        Return the explicit root rule name if there is one. Otherwise, return the
        name of the PUBLIC, activatable rule with the lowest insertion ID, or None
        if there is no such rule.

        :returns: str | None
        """
        if self._root is not None:
            return self._root

        candidates = self.activatable_rules
        if not candidates:
            return None
        return candidates[0].name


class _WorkingState:
    """ Mutable rule set that queued operations are applied to. """
    def __init__(self, snapshot):
        self.rules = dict(snapshot.rules)
        self.root = snapshot.explicit_root

    def lookup(self, name):
        internal = self.rules.get(name)
        if internal is None:
            raise GrammarError("rule %r was not found in the grammar" % name)
        return internal


class _RuleGrammarOperation:
    def execute(self, state):
        """
        Apply this operation to a working state. Operations must either apply
        fully or raise a ``GrammarError`` without changing the state.

        :returns: whether the state was changed
        :rtype: bool
        """
        raise NotImplementedError()


class _AddRuleOperation(_RuleGrammarOperation):
    def __init__(self, internal_rule):
        self.internal_rule = internal_rule

    def execute(self, state):
        name = self.internal_rule.name
        existing = state.rules.get(name)
        if existing is not None:
            if existing.rule == self.internal_rule.rule:
                # Silently return if the rule is comparable to the one in the
                # grammar.
                return False
            raise GrammarError("grammars cannot have multiple rules with the "
                               "same name: %r" % name)
        state.rules[name] = self.internal_rule
        return True

    def __str__(self):
        return "add %s" % self.internal_rule.rule


class _RemoveRuleOperation(_RuleGrammarOperation):
    def __init__(self, name):
        self.name = name

    def execute(self, state):
        state.lookup(self.name)
        del state.rules[self.name]

        # The root rule will be derived again if it was removed.
        if state.root == self.name:
            state.root = None
        return True

    def __str__(self):
        return "remove %r" % self.name


class _ActivationOperation(_RuleGrammarOperation):
    def __init__(self, names, enabled):
        self.names = names
        self.enabled = enabled

    def execute(self, state):
        # Validate every name before changing anything.
        internal_rules = []
        for name in self.names:
            internal = state.lookup(name)
            if not internal.visible:
                raise GrammarError("rule %r doesn't have PUBLIC scope" % name)
            internal_rules.append(internal)

        changed = False
        for internal in internal_rules:
            if internal.activatable != self.enabled:
                state.rules[internal.name] = internal.with_activatable(
                    self.enabled)
                changed = True
        return changed

    def __str__(self):
        return "set activatable=%s for %s" % (self.enabled, list(self.names))


class _RootSetterOperation(_RuleGrammarOperation):
    def __init__(self, name):
        self.name = name

    def execute(self, state):
        if self.name is not None:
            internal = state.lookup(self.name)
            if not internal.visible:
                raise GrammarError("cannot set PRIVATE rule %r as the root rule"
                                   % self.name)

        changed = state.root != self.name
        state.root = self.name
        return changed

    def __str__(self):
        return "set root %r" % self.name


class RuleGrammar(references.BaseRef):
    """
    Transactional container for the named rules of one grammar.

    Grammar references can be either a qualified name with dots or a single name,
    for example ``com.example.grammar`` or ``grammar:test``.

    The following methods queue changes: ``add_rule``, ``add_rules``,
    ``remove_rule``, ``set_root`` and ``set_activatable``. Queued changes take
    effect when ``commit_changes`` is called. Every other method and property
    only sees committed changes.
    """

    #: Default values of grammar attributes.
    default_attributes = {
        "version": "1.0",
        "mode": "voice",
        "tag-format": "",
    }

    #: Attributes that are accepted for VoiceXML compatibility and ignored.
    ignored_attributes = ("type", "scope", "src", "weight", "fetchtimeout",
                          "maxage", "maxstale")

    def __init__(self, reference, locale=None, manager=None):
        """
        :param reference: grammar reference name
        :param locale: locale string, e.g. ``"en-US"`` (default None)
        :param manager: GrammarManager used to resolve qualified rule references
            (default None)
        """
        super().__init__(reference)
        self.locale = locale
        self.manager = manager
        self._attributes = dict(self.default_attributes)
        self._snapshot = GrammarSnapshot({})
        self._pending = []
        self._ids = itertools.count()
        self._lock = threading.Lock()

    @staticmethod
    def valid(name):
        return references.valid_grammar_name(name)

    @property
    def reference(self):
        """
        This grammar's reference name.

        :returns: str
        """
        return self.name

    @property
    def snapshot(self):
        """
        The snapshot published by the last commit.

        :returns: GrammarSnapshot
        """
        return self._snapshot

    # Queued operations.

    def _queue(self, operation):
        with self._lock:
            self._pending.append(operation)
        logger.debug("grammar %r: queued operation: %s", self.name, operation)

    def add_rule(self, rule):
        """
        Queue adding a rule to the grammar.

        :param rule: Rule
        :raises: TypeError
        """
        if not isinstance(rule, Rule):
            raise TypeError("object '%s' was not a Rule object" % (rule,))

        # Insertion IDs are assigned once, when the rule is queued.
        with self._lock:
            internal = InternalRule(rule, next(self._ids))
            self._pending.append(_AddRuleOperation(internal))
        logger.debug("grammar %r: queued adding %s with ID %d", self.name, rule,
                     internal.insertion_id)

    def add_rules(self, *rules):
        """
        Queue adding multiple rules to the grammar.

        :param rules: rules
        :raises: TypeError
        """
        for r in rules:
            self.add_rule(r)

    def remove_rule(self, rule):
        """
        Queue removing a rule from this grammar.

        :param rule: Rule object or the name of a rule in this grammar
        """
        name = rule.name if isinstance(rule, Rule) else rule
        self._queue(_RemoveRuleOperation(name))

    def set_root(self, name):
        """
        Queue setting the root rule of this grammar. Pass None to derive the root
        rule automatically from the PUBLIC, activatable rules.

        Root changes are applied after every other queued change.

        :param name: str | None
        """
        self._queue(_RootSetterOperation(name))

    def set_activatable(self, names, enabled):
        """
        Queue enabling or disabling one or more PUBLIC rules for matching without
        a rule name.

        :param names: rule name or iterable of rule names
        :param enabled: bool
        """
        if isinstance(names, str):
            names = (names,)
        self._queue(_ActivationOperation(tuple(names), bool(enabled)))

    @property
    def has_pending_changes(self):
        """
        Whether there are queued changes that haven't been committed.

        :returns: bool
        """
        return bool(self._pending)

    def commit_changes(self):
        """
        Apply all queued changes in the order in which they were queued, except for
        root changes which are applied last.

        Operations that fail do not stop later operations and operations that
        succeeded are not rolled back. The resulting rules are published as a new
        snapshot before any failures are raised.

        :returns: whether any queued change altered the grammar
        :rtype: bool
        :raises: CommitError
        """
        errors = []
        changed = False
        with self._lock:
            operations, self._pending = self._pending, []
            if not operations:
                return False

            state = _WorkingState(self._snapshot)
            root_setter = None
            for operation in operations:
                if isinstance(operation, _RootSetterOperation):
                    root_setter = operation
                    continue
                try:
                    changed = operation.execute(state) or changed
                except GrammarError as e:
                    errors.append(e)

            # Perform the root setter as the last operation.
            if root_setter is not None:
                try:
                    changed = root_setter.execute(state) or changed
                except GrammarError as e:
                    errors.append(e)

            self._snapshot = GrammarSnapshot(state.rules, state.root)

        logger.debug("grammar %r: committed %d operation(s), %d failed",
                     self.name, len(operations), len(errors))
        if errors:
            raise CommitError(errors)
        return changed

    # Committed state.

    def get_rule(self, name):
        """
        Get the rule with the specified name, if it is in the grammar.

        :param name: str
        :returns: Rule | None
        """
        return self._snapshot.get_rule(name)

    @property
    def rules(self):
        """
        The rules in this grammar, in insertion order.

        :returns: list
        """
        return [r.rule for r in self._snapshot.ordered_rules]

    visible_rules = property(
        lambda self: [rule for rule in self.rules if rule.visible],
        doc="""
        The rules in this grammar with PUBLIC scope.

        :returns: list
        """
    )

    rule_names = property(
        lambda self: [r.name for r in self._snapshot.ordered_rules],
        doc="""
        The names of the rules in this grammar, in insertion order.

        :returns: list
        """
    )

    def list_rule_names(self):
        """
        The names of the rules in this grammar, in insertion order.

        :returns: list
        """
        return self.rule_names

    def is_activatable(self, name):
        """
        Whether a rule is a *PUBLIC* rule in this grammar that is enabled for
        matching without a rule name.

        :param name: str
        :returns: bool
        """
        internal = self._snapshot.rules.get(name)
        return internal is not None and internal.visible and internal.activatable

    @property
    def root(self):
        """
        The name of this grammar's root rule.

        This is the rule set with ``set_root`` if there is one. Otherwise, it is the
        PUBLIC, activatable rule that was added first, or None if there is no such
        rule.

        :returns: str | None
        """
        return self._snapshot.resolve_root()

    # Attributes.

    def set_attribute(self, name, value):
        """
        Set a grammar attribute.

        Setting the ``root`` attribute queues a root change.

        :param name: str
        :param value: str
        :raises: ValueError
        """
        if name == "root":
            self.set_root(value)
        elif name == "xml:lang":
            self.locale = value
        elif name in self._attributes:
            self._attributes[name] = value
        elif name in self.ignored_attributes:
            pass
        else:
            raise ValueError("unknown attribute name: %r" % name)

    def set_attributes(self, attributes):
        """
        Set multiple grammar attributes.

        :param attributes: dict
        :raises: ValueError
        """
        for name, value in attributes.items():
            self.set_attribute(name, value)

    def get_attribute(self, name):
        """
        Get a grammar attribute.

        :param name: str
        :returns: str | None
        :raises: ValueError
        """
        if name == "root":
            return self.root
        elif name == "xml:lang":
            return self.locale
        elif name in self._attributes:
            return self._attributes[name]
        raise ValueError("unknown attribute: %r" % name)

    # Compilation and matching.

    @property
    def header(self):
        """
        The header line for this grammar. By default this is::

            #JSGF V1.0;

        :returns: str
        """
        header = "#JSGF V%s" % self._attributes["version"]

        # Add the character set and locale only if a locale is set.
        if self.locale:
            header += " UTF-8 %s" % self.locale

        return header + ";\n"

    def compile(self, include_disabled=True):
        """
        Compile this grammar's header and committed rules into a string that can
        be loaded with ``parse_grammar_string``.

        :param include_disabled: whether to include rules that are not activatable
            (default True)
        :returns: str
        """
        snapshot = self._snapshot
        result = self.header
        result += "grammar %s;\n" % self.name
        if snapshot.explicit_root is not None:
            result += "root <%s>;\n" % snapshot.explicit_root

        for internal in snapshot.ordered_rules:
            if include_disabled or internal.activatable:
                result += "%s\n" % internal.rule.compile()

        return result

    def match(self, tokens, rule_name=None, **kwargs):
        """
        Match tokens against a rule in this grammar, or against the activatable
        PUBLIC rules if no rule name is given, and return the first parse.

        :param tokens: list of words or a string
        :param rule_name: str | None
        :returns: RuleParse | None
        :raises: GrammarError
        """
        return match(self, tokens, rule_name, manager=self.manager, **kwargs)

    def match_all(self, tokens, rule_name=None, **kwargs):
        """
        Like ``match``, but return a list of every successful parse.

        :param tokens: list of words or a string
        :param rule_name: str | None
        :returns: list
        :raises: GrammarError
        """
        return match_all(self, tokens, rule_name, manager=self.manager, **kwargs)

    def __str__(self):
        locale = self.locale if self.locale else "<auto>"
        return "%s(reference=%s, locale=%s, root=%s)" % (
            self.__class__.__name__, self.name, locale, self.root
        )

    def __repr__(self):
        return self.__str__()

    def __eq__(self, other):
        return (isinstance(other, RuleGrammar) and self.name == other.name and
                self.locale == other.locale and
                self._attributes == other._attributes and
                self.root == other.root and
                self._snapshot.rules.keys() == other.snapshot.rules.keys() and
                self.rules == other.rules)

    def __hash__(self):
        return super().__hash__()
