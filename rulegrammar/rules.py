# This Python file uses the following encoding: utf-8

"""
This module contains the rule classes.
"""

from . import references
from .components import RuleComponent, Reference, Tag, filter_component, \
    TraversalOrder

#: Scope of rules that can be a grammar's root rule, be activated and be matched
#: without specifying a rule name.
PUBLIC = "public"

#: Scope of rules that are only usable through references from other rules.
PRIVATE = "private"


class Rule(references.BaseRef):
    r"""
    Class for named grammar rules.

    Rule names can be a single word containing one or more alphanumeric Unicode
    characters and/or any of the following special characters: +-:;|/\()[]@#%!^&~$

    For example, the following are valid rule names:

    * hello
    * Zürich
    * user_test
    * $100

    There are two reserved rule names: NULL and VOID. These reserved names cannot be
    used as rule names. You can however change the case to 'null' or 'void' to use
    them, as names are case-sensitive.

    Rules are immutable. Use a grammar's ``remove_rule`` and ``add_rule`` methods
    to change a rule in a grammar.
    """
    def __init__(self, name, scope, component):
        """
        :param name: str
        :param scope: PUBLIC or PRIVATE
        :param component: a string or RuleComponent object
        """
        super().__init__(name)
        if scope not in (PUBLIC, PRIVATE):
            raise ValueError("scope must be either %r or %r, got %r instead"
                             % (PUBLIC, PRIVATE, scope))
        self._scope = scope
        self._component = RuleComponent.make_component(component)

    @property
    def scope(self):
        """
        This rule's scope: PUBLIC or PRIVATE.

        :returns: str
        """
        return self._scope

    @property
    def visible(self):
        """
        Whether this rule has PUBLIC scope.

        :returns: bool
        """
        return self._scope == PUBLIC

    @property
    def component(self):
        """
        This rule's component tree.

        :returns: RuleComponent
        """
        return self._component

    def compile(self):
        """
        Compile this rule into grammar text.

        :returns: str
        """
        result = "<%s> = %s;" % (self.name, self._component.compile())
        if self.visible:
            return "public %s" % result
        else:
            return result

    @property
    def references(self):
        """
        The rule references used in this rule's component tree, in the order in
        which they appear.

        :returns: list
        """
        return filter_component(self._component,
                                lambda x: isinstance(x, Reference))

    @property
    def tags(self):
        """
        The values of the tags used in this rule's component tree, in the order in
        which they appear.

        :returns: list
        """
        return [t.value for t in filter_component(
            self._component, lambda x: isinstance(x, Tag), TraversalOrder.PreOrder
        )]

    def __str__(self):
        return "%s(name='%s', scope=%s, component=%s)" %\
               (self.__class__.__name__, self.name, self.scope, self.component)

    def __hash__(self):
        # The hash of a rule is the hash of its name, scope and component
        # hashes combined.
        return hash("%s%s%s" % (hash(self.name),
                                hash(self.scope), hash(self.component)))

    def __eq__(self, other):
        return (isinstance(other, Rule) and
                self.name == other.name and
                self.component == other.component and
                self.scope == other.scope)

    def __ne__(self, other):
        return not self.__eq__(other)


class PublicRule(Rule):
    """
    Rule subclass with ``scope`` set to PUBLIC.
    """
    def __init__(self, name, component):
        super().__init__(name, PUBLIC, component)

    def __hash__(self):
        return super().__hash__()

    def __str__(self):
        return "%s(name='%s', component=%s)" %\
               (self.__class__.__name__, self.name, self.component)


class PrivateRule(Rule):
    """
    Rule subclass with ``scope`` set to PRIVATE.
    """
    def __init__(self, name, component):
        super().__init__(name, PRIVATE, component)

    def __hash__(self):
        return super().__hash__()

    def __str__(self):
        return "%s(name='%s', component=%s)" %\
               (self.__class__.__name__, self.name, self.component)
