"""
This module contains the name grammars and the base class for referencing rules
and grammars by name.
"""

import re

from pyparsing import Regex, OneOrMore, Combine
from pyparsing import Literal as PPLiteral  # to differentiate from Token

from .errors import GrammarError

# Define words as Unicode alphanumerics and/or one of "-\'"
word = Regex(r"[\w\-\']+", re.UNICODE).set_name("word")
words = OneOrMore(word).set_name("token")

# Define a parser for reserved names.
reserved_names = Combine(PPLiteral("NULL") ^ PPLiteral("VOID"))

# This will match one or more alphanumeric Unicode characters and/or any of the
# following special characters: +-:;|/\()[]@#%!^&~$
base_name = Regex(r"[\w\+\-;:\|/\\\(\)\[\]@#%!\^&~\$]+", re.UNICODE)\
    .set_name("base name")

# A qualified name is a base name plus one or more base names joined by dots.
qualified_name = Combine(base_name + OneOrMore("." + base_name))\
    .set_name("qualified name")

# An optionally qualified name is either a base name or a qualified name. This is
# used for rule references.
optionally_qualified_name = Combine(base_name ^ qualified_name)\
    .set_name("reference name")

# Grammar names cannot include semicolons because the grammar declaration parser
# would gobble any semicolon after the name that isn't separated by whitespace.
_grammar_base_name = Regex(r"[\w\+\-:\|/\\\(\)\[\]@#%!\^&~\$]+", re.UNICODE)\
    .set_name("base name")
grammar_name = Combine(_grammar_base_name ^ Combine(
    _grammar_base_name + OneOrMore("." + _grammar_base_name)))\
    .set_name("grammar name")


def _matches(element, name):
    return isinstance(name, str) and element.matches(name, parse_all=True)


def valid_rule_name(name):
    """
    Whether a string is a valid, unreserved rule name.

    :param name: str
    :returns: bool
    """
    return _matches(base_name, name) and not _matches(reserved_names, name)


def valid_grammar_name(name):
    """
    Whether a string is a valid grammar reference.

    :param name: str
    :returns: bool
    """
    return _matches(grammar_name, name) and not _matches(reserved_names, name)


def split_reference_name(name):
    """
    Split an optionally qualified reference name such as ``"com.example.g.rule"``
    into a grammar reference and a rule name. The grammar reference is None for
    unqualified names.

    :param name: str
    :returns: tuple
    """
    if "." not in name:
        return None, name
    grammar, _, rule_name = name.rpartition(".")
    return grammar, rule_name


class BaseRef:
    """
    Base class for named, immutable grammar objects.
    """
    def __init__(self, name):
        # Validate the format of name
        if not self.valid(name):
            raise GrammarError("'%s' is not a valid %s name"
                               % (name, self.__class__.__name__))
        self._name = name

    def __eq__(self, other):
        return type(self) == type(other) and self.name == other.name

    def __ne__(self, other):
        return not self.__eq__(other)

    def __str__(self):
        return "%s(%s)" % (self.__class__.__name__, self.name)

    def __repr__(self):
        return self.__str__()

    def __hash__(self):
        return hash(self.name)

    @property
    def name(self):
        """
        The referenced name.

        :returns: str
        """
        return self._name

    @staticmethod
    def valid(name):
        """
        Static method for checking if a name is valid.

        This should be overwritten appropriately in subclasses.

        :param name: str
        :returns: bool
        """
        return valid_rule_name(name)
