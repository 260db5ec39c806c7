"""
This module contains the immutable rule component classes that make up a rule's
structure, the ``RuleParse`` class used for match results and functions for
traversing component trees.
"""

import re

from .errors import CompilationError, GrammarError
from .references import valid_rule_name, valid_grammar_name

#: Value of ``Count.max_repeat`` for components that may repeat indefinitely.
REPEAT_INDEFINITELY = None

_plain_word = re.compile(r"^[\w\-\']+$", re.UNICODE)


class TraversalOrder:
    PreOrder, PostOrder = list(range(2))


def map_component(c, func=lambda x: x, order=TraversalOrder.PreOrder):
    """
    Traverse a component tree and call func on each component returning a tuple
    structure with the results.

    :param c: RuleComponent
    :param func: callable (default: the identity function, f(x)->x)
    :param order: int
    :returns: tuple
    """
    def map_children(x):
        return tuple([map_component(child, func, order) for child in x.children])

    if order == TraversalOrder.PreOrder:
        return func(c), map_children(c)
    elif order == TraversalOrder.PostOrder:
        return map_children(c), func(c)
    else:
        raise ValueError("order should be either %d for pre-order or %d for "
                         "post-order" % (TraversalOrder.PreOrder,
                                         TraversalOrder.PostOrder))


def find_component(c, func=lambda x: x, order=TraversalOrder.PreOrder):
    """
    Find the first component in a component tree for which func(x) is True
    and return it. Otherwise return None.

    :param c: RuleComponent
    :param func: callable (default: the identity function, f(x)->x)
    :param order: int
    :returns: RuleComponent | None
    """
    def find_in_children(x):
        for child in x.children:
            child_result = find_component(child, func, order)
            if child_result is not None:
                return child_result

    if order == TraversalOrder.PreOrder:
        if func(c):
            return c
        return find_in_children(c)
    elif order == TraversalOrder.PostOrder:
        result = find_in_children(c)
        if result is not None:
            return result
        elif func(c):
            return c
    else:
        raise ValueError("order should be either %d for pre-order or %d for "
                         "post-order" % (TraversalOrder.PreOrder,
                                         TraversalOrder.PostOrder))


def flat_map_component(c, func=lambda x: x, order=TraversalOrder.PreOrder):
    """
    Call map_component with the arguments and return a single flat list.

    :param c: RuleComponent
    :param func: callable (default: the identity function, f(x)->x)
    :param order: int
    :returns: list
    """
    result = []

    def flatten(x):
        result.append(func(x))

    map_component(c, flatten, order)

    return result


def filter_component(c, func=lambda x: x, order=TraversalOrder.PreOrder):
    """
    Find all components in a component tree for which func(x) == True.

    :param c: RuleComponent
    :param func: callable (default: the identity function, f(x)->x)
    :param order: int
    :returns: list
    """
    result = []

    def filter_(x):
        if func(x):
            result.append(x)

    map_component(c, filter_, order)

    return result


def _compile_atom(c):
    # Compile a component so that a unary operator can follow it.
    compiled = c.compile()
    if isinstance(c, Count) or isinstance(c, Sequence) and len(c.children) != 1:
        return "(%s)" % compiled
    return compiled


class RuleComponent:
    """
    Rule component base class.

    Components are immutable once constructed.
    """
    def __init__(self, children=()):
        self._children = tuple([self.make_component(c) for c in children])

    @property
    def children(self):
        """
        Tuple of child components.

        :returns: tuple
        """
        return self._children

    @staticmethod
    def make_component(c):
        """
        Take an object, turn it into a RuleComponent if it isn't one and return it.

        :param c: str | RuleComponent
        :returns: RuleComponent
        """
        if isinstance(c, RuleComponent):
            return c
        elif isinstance(c, str):
            return Token(c)
        else:
            raise TypeError("expected a string or RuleComponent, got %r instead"
                            % (c,))

    def validate_compilable(self):
        """
        Check that the component is compilable. If it isn't, this method should
        raise a ``CompilationError``.

        :raises: CompilationError
        """
        pass

    def compile(self):
        """
        Compile this component tree into grammar text.

        :returns: str
        """
        raise NotImplementedError()

    def __str__(self):
        descendants = ", ".join(["%s" % c for c in self.children])
        return "%s(%s)" % (self.__class__.__name__, descendants)

    def __repr__(self):
        return self.__str__()

    def __eq__(self, other):
        return type(self) == type(other) and self.children == other.children

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        child_hashes = [hash(c) for c in self.children]
        return hash("%s(%s)" % (self.__class__.__name__, child_hashes))

    def __contains__(self, item):
        return item in flat_map_component(self)


class Token(RuleComponent):
    """
    Component for a literal word or a space-separated phrase of words.

    Tokens are matched case-insensitively.
    """
    def __init__(self, text):
        if not isinstance(text, str):
            raise TypeError("expected string, got %r instead" % (text,))
        self._text = text
        super().__init__()

    @property
    def text(self):
        """
        Text to match.

        :returns: str
        """
        return self._text

    @property
    def words(self):
        """
        The whitespace-separated words of this token's text.

        :returns: tuple
        """
        return tuple(self._text.split())

    def validate_compilable(self):
        if not self.words:
            raise CompilationError("%s component cannot be compiled with a text "
                                   "value of '%s'"
                                   % (self.__class__.__name__, self.text))

    def compile(self):
        self.validate_compilable()
        words = self.words
        if len(words) == 1 and _plain_word.match(words[0]):
            return words[0]

        # Quote phrases and words with special characters.
        escaped = " ".join(words).replace("\\", "\\\\").replace('"', '\\"')
        return '"%s"' % escaped

    def __str__(self):
        return "%s('%s')" % (self.__class__.__name__, self.text)

    def __eq__(self, other):
        return type(self) == type(other) and self.text == other.text

    def __hash__(self):
        return hash("%s" % self)


class Reference(RuleComponent):
    """
    Component referencing another rule by name, optionally in another grammar.
    """
    def __init__(self, rule_name, grammar_reference=None):
        if not valid_rule_name(rule_name):
            raise GrammarError("'%s' is not a valid rule name" % (rule_name,))
        if grammar_reference is not None and \
                not valid_grammar_name(grammar_reference):
            raise GrammarError("'%s' is not a valid grammar reference"
                               % (grammar_reference,))
        self._rule_name = rule_name
        self._grammar_reference = grammar_reference
        super().__init__()

    @property
    def rule_name(self):
        """
        Name of the referenced rule.

        :returns: str
        """
        return self._rule_name

    @property
    def grammar_reference(self):
        """
        Reference of the grammar containing the rule, if one was given.

        :returns: str | None
        """
        return self._grammar_reference

    @property
    def qualified_name(self):
        """
        The rule name prefixed with the grammar reference, if there is one.

        :returns: str
        """
        if self._grammar_reference:
            return "%s.%s" % (self._grammar_reference, self._rule_name)
        return self._rule_name

    def compile(self):
        return "<%s>" % self.qualified_name

    def __str__(self):
        return "%s('%s')" % (self.__class__.__name__, self.qualified_name)

    def __eq__(self, other):
        return (type(self) == type(other) and
                self.rule_name == other.rule_name and
                self.grammar_reference == other.grammar_reference)

    def __hash__(self):
        return hash("%s" % self)


class Alternatives(RuleComponent):
    """
    Component for a set of alternatives, exactly one of which must match.

    Alternatives are tried in declaration order during matching. Weights are
    carried for external consumers, such as speech recognition engines, but are
    not used for matching.
    """
    def __init__(self, *components, weights=None):
        super().__init__(components)
        if weights is not None:
            weights = tuple([float(w) for w in weights])
            if len(weights) != len(self.children):
                raise ValueError("expected %d weights, got %d"
                                 % (len(self.children), len(weights)))
            for w in weights:
                if w < 0:
                    raise ValueError("weight value '%s' is a negative number" % w)
        self._weights = weights

    @property
    def weights(self):
        """
        Tuple of weights, one for each alternative, or None.

        :returns: tuple | None
        """
        return self._weights

    def compile(self):
        # The empty alternative set can never be spoken.
        if not self.children:
            return "<VOID>"

        if self._weights:
            # /<w 0>/ <e 0> | ... | /<w n-1>/ <e n-1>
            alt_set = "|".join([
                "/%.4f/ %s" % (w, c.compile())
                for c, w in zip(self.children, self._weights)
            ])
        else:
            alt_set = "|".join([c.compile() for c in self.children])
        return "(%s)" % alt_set

    def __str__(self):
        result = super().__str__()
        if self._weights:
            result = "%s with weights %s" % (result, list(self._weights))
        return result

    def __eq__(self, other):
        return (super().__eq__(other) and
                self.weights == other.weights)

    def __hash__(self):
        return hash("%s%s" % (super().__hash__(), self._weights))


class Sequence(RuleComponent):
    """
    Component for children that must all match in order.
    """
    def __init__(self, *components):
        super().__init__(components)

    def compile(self):
        # The empty sequence is always spoken.
        if not self.children:
            return "<NULL>"
        return " ".join([
            "(%s)" % c.compile() if isinstance(c, Sequence) and
            len(c.children) > 1 else c.compile()
            for c in self.children
        ])


class Count(RuleComponent):
    """
    Component for a child that must match between ``min_repeat`` and
    ``max_repeat`` times (inclusive).

    A ``max_repeat`` value of ``REPEAT_INDEFINITELY`` (None) means that there is
    no upper bound.
    """
    def __init__(self, component, min_repeat=0, max_repeat=REPEAT_INDEFINITELY,
                 repeat_probability=None):
        super().__init__([component])
        if min_repeat < 0:
            raise ValueError("repeat minimum must be greater than or equal to 0")
        if max_repeat is not REPEAT_INDEFINITELY and max_repeat < min_repeat:
            raise ValueError("repeat maximum must be greater than or equal to the"
                             " repeat minimum")
        if repeat_probability is not None and repeat_probability < 0:
            raise ValueError("repeat probability must be greater than or equal to"
                             " 0")
        self._min_repeat = min_repeat
        self._max_repeat = max_repeat
        self._repeat_probability = repeat_probability

    @property
    def child(self):
        return self.children[0]

    @property
    def min_repeat(self):
        return self._min_repeat

    @property
    def max_repeat(self):
        """
        The maximum number of repeats or ``REPEAT_INDEFINITELY``.

        :returns: int | None
        """
        return self._max_repeat

    @property
    def repeat_probability(self):
        return self._repeat_probability

    @property
    def indefinite(self):
        """
        Whether the child can repeat without an upper bound.

        :returns: bool
        """
        return self._max_repeat is REPEAT_INDEFINITELY

    def compile(self):
        # Note that the repeat probability has no text representation.
        low, high = self._min_repeat, self._max_repeat
        if (low, high) == (0, 1):
            return "[%s]" % self.child.compile()

        atom = _compile_atom(self.child)
        if (low, high) == (1, REPEAT_INDEFINITELY):
            return "%s+" % atom
        elif (low, high) == (0, REPEAT_INDEFINITELY):
            return "%s*" % atom
        elif high is REPEAT_INDEFINITELY:
            return "%s<%d->" % (atom, low)
        elif low == high:
            return "%s<%d>" % (atom, low)
        else:
            return "%s<%d-%d>" % (atom, low, high)

    def __str__(self):
        return "%s(%s, %s, %s)" % (self.__class__.__name__, self.child,
                                   self._min_repeat, self._max_repeat)

    def __eq__(self, other):
        # Convenience subclasses compare equal to equivalent Count objects.
        return (isinstance(other, Count) and self.child == other.child and
                self.min_repeat == other.min_repeat and
                self.max_repeat == other.max_repeat and
                self.repeat_probability == other.repeat_probability)

    def __hash__(self):
        return hash(("Count", self.child, self._min_repeat, self._max_repeat,
                     self._repeat_probability))


class Optional(Count):
    """
    Count subclass for a child that may match zero or one times.
    """
    def __init__(self, component):
        super().__init__(component, 0, 1)

    def __str__(self):
        return "%s(%s)" % (self.__class__.__name__, self.child)


class Repeat(Count):
    """
    Count subclass for a child that must match one or more times.
    """
    def __init__(self, component):
        super().__init__(component, 1, REPEAT_INDEFINITELY)

    def __str__(self):
        return "%s(%s)" % (self.__class__.__name__, self.child)


class KleeneStar(Count):
    """
    Count subclass for a child that may match zero or more times.
    """
    def __init__(self, component):
        super().__init__(component, 0, REPEAT_INDEFINITELY)

    def __str__(self):
        return "%s(%s)" % (self.__class__.__name__, self.child)


class Tag(RuleComponent):
    """
    Component carrying a semantic tag value. Tags consume no input.
    """
    def __init__(self, value):
        self._value = value
        super().__init__()

    @property
    def value(self):
        return self._value

    def compile(self):
        # Escape '\', '{' and '}' so that tags will be processed properly.
        escaped = str(self._value).replace("\\", "\\\\") \
            .replace("{", "\\{") \
            .replace("}", "\\}")
        return "{%s}" % escaped

    def __str__(self):
        return "%s(%r)" % (self.__class__.__name__, self._value)

    def __eq__(self, other):
        return type(self) == type(other) and self.value == other.value

    def __hash__(self):
        return hash(("Tag", self._value))


class RuleParse(RuleComponent):
    """
    The result of successfully matching tokens against a rule.

    ``parse`` is the component tree reconstructed from the matched path: tokens
    carry the text of the matched rule tokens, tags carry their values,
    alternatives hold only the chosen branch, counts hold a sequence of the
    repeats that matched and references to other rules are nested
    ``RuleParse`` objects.
    """
    def __init__(self, reference, parse):
        if not isinstance(reference, Reference):
            raise TypeError("expected a Reference, got %r instead" % (reference,))
        self._reference = reference
        self._parse = parse
        super().__init__([] if parse is None else [parse])

    @property
    def reference(self):
        return self._reference

    @property
    def rule_name(self):
        """
        Name of the matched rule.

        :returns: str
        """
        return self._reference.rule_name

    @property
    def grammar_reference(self):
        return self._reference.grammar_reference

    @property
    def parse(self):
        """
        The reconstructed component tree.

        :returns: RuleComponent | None
        """
        return self._parse

    #: Alias of :attr:`parse`.
    component = parse

    @property
    def tags(self):
        """
        The values of the tags passed through during the match, in input order.
        This includes tags in referenced rules.

        :returns: list
        """
        return [t.value for t in
                filter_component(self, lambda x: isinstance(x, Tag))]

    @property
    def tokens(self):
        """
        The text of each matched token, in input order.

        :returns: list
        """
        return [t.text for t in
                filter_component(self, lambda x: isinstance(x, Token))]

    def compile(self):
        if self._parse is None:
            return ""
        return self._parse.compile()

    def __str__(self):
        return "%s(%s, %s)" % (self.__class__.__name__,
                               self._reference.qualified_name, self._parse)

    def __eq__(self, other):
        return (type(self) == type(other) and
                self.reference == other.reference and
                self.parse == other.parse)

    def __hash__(self):
        return hash(("RuleParse", self._reference, self._parse))
