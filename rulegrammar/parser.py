# encoding=utf-8
"""
This module contains functions that parse grammar text into ``Rule`` and
``RuleComponent`` objects.

=======================
Supported functionality
=======================
The parser functions support the following:

* Alternatives, e.g. ``a|b|c``.
* Alternative weights (e.g. ``/10/ a | /20/ b | /30/ c``). Either every
  alternative of a set has a weight or none do.
* C++ style single/in-line and multi-line comments (``// ...`` and ``/* ... */``
  respectively).
* Optional groupings, e.g. ``[this is optional]``.
* Public and private rules.
* Groupings, e.g. ``(a b c) | (e f g)``.
* Rule references, e.g. ``<command>``, and qualified rule references, e.g.
  ``<com.example.numbers.digit>``.
* Sequences, e.g. ``run <command> [now] [please]``. Each unquoted word is a
  separate token.
* Quoted tokens, e.g. ``"new york"``, which match all of their words as one token.
* Tags, e.g. ``text {tag1} {tag2}``. Tags are matched as part of the sequence
  they appear in.
* Special rules ``<NULL>`` and ``<VOID>``.
* Unary repeat operators: ``+`` (one or more), ``*`` (zero or more), ``<m-n>``
  (between m and n), ``<m->`` (m or more) and ``<m>`` (exactly m).
* Using Unicode alphanumeric characters for names, references and tokens.
* An optional ``root <rule>;`` declaration after the grammar name.

===========
Limitations
===========

A reference to a rule whose name is a number or a number range, such as ``<5>``
or ``<1-2>``, is parsed as a repeat operator when it follows another component.

=========================
Extended Backus–Naur form
=========================
The following is the EBNF used by the parsers::

    alphanumeric = ? any alphanumeric Unicode character ? ;
    weight = '/' , ? any non-negative number ? , '/' ;
    atom = word | quoted token | '<' , reference name , '>' | tag |
           '(' , exp , ')' | '[' , exp , ']' ;
    unary = atom , { '+' | '*' | repeat range } ;
    repeat range = '<' , integer , [ '-' , [ integer ] ] , '>' ;
    sequence = unary , { unary } ;
    alternative = [ weight ] , sequence ;
    exp = alternative , { '|' , alternative } ;
    grammar = grammar header , grammar declaration , [ root declaration ] ,
              { rule definition } ;
    grammar declaration = 'grammar' , grammar name , ';' ;
    grammar header = '#JSGF', ( 'v' | 'V' ) , version , [ word ] , [ word ] ,
                     ';' ;
    root declaration = 'root' , '<' , identifier , '>' , ';' ;
    identifier = { alphanumeric | special } ;
    qualified name = identifier , { '.' , identifier }  ;
    reference name = identifier | qualified name ;
    rule definition = [ 'public' ] , '<' , identifier , '>' , '=' , exp , ';' ;
    special = '+' | '-' | ':' | ';' | '|' | '/' | '$' | '(' | ')' | '[' | ']' |
              '@' | '#' | '%' | '!' | '^' | '&' | '~' | '\\' ;
    tag = '{' , { ? any character ? | '\\{' | '\\}' } , '}' ;
    word = { alphanumeric | "'" | '-' } ;
    quoted token = '"' , { ? any character ? | '\\"' } , '"' ;

"""

import re

from pyparsing import (CaselessKeyword, CaselessLiteral, Forward, Keyword, Opt,
                       ParseBaseException, QuotedString, Regex, Suppress,
                       ZeroOrMore, cpp_style_comment, pyparsing_common)
from pyparsing import Literal as PPLiteral  # to differentiate from Token

from .components import (Alternatives, Count, KleeneStar, Optional, Reference,
                         Repeat, Sequence, Tag, Token)
from .errors import GrammarError
from .references import (base_name, grammar_name, optionally_qualified_name,
                         split_reference_name, word)
from .rules import PRIVATE, PUBLIC, Rule

# Define angled brackets and line endings that don't appear in the output.
langle, rangle = map(Suppress, "<>")
line_delimiter = Suppress(";").set_name("line end")

_repeat_range = re.compile(r"<\s*(\d+)\s*(?:(-)\s*(\d*)\s*)?>")
_tag_escape = re.compile(r"\\(.)")
_locale = re.compile(r"^[a-zA-Z]{2,3}(-[a-zA-Z0-9]+)*$")


class _RepeatRange:
    """ Repeat operator bounds used during parsing. """
    def __init__(self, min_repeat, max_repeat):
        self.min_repeat = min_repeat
        self.max_repeat = max_repeat


class _WeightedComponent:
    """ Alternative with a weight used during parsing of alternatives. """
    def __init__(self, weight, component):
        self.weight = weight
        self.component = component


def _reference_action(tokens):
    name = tokens[0]
    if name == "NULL":
        return Sequence()
    elif name == "VOID":
        return Alternatives()
    grammar, rule_name = split_reference_name(name)
    return Reference(rule_name, grammar)


def _tag_action(tokens):
    # Remove the braces and unescape '\', '{' and '}'.
    return Tag(_tag_escape.sub(r"\1", tokens[0][1:-1]))


def _range_action(tokens):
    low, dash, high = _repeat_range.match(tokens[0]).groups()
    low = int(low)
    if not dash:
        high = low
    elif high:
        high = int(high)
    else:
        high = None
    if high is not None and high < low:
        raise GrammarError("repeat maximum %d is less than the minimum %d"
                           % (high, low))
    return _RepeatRange(low, high)


def _unary_action(tokens):
    # Apply each operator to the component on its left.
    component = tokens[0]
    for operator in tokens[1:]:
        if operator == "+":
            component = Repeat(component)
        elif operator == "*":
            component = KleeneStar(component)
        else:
            component = Count(component, operator.min_repeat,
                              operator.max_repeat)
    return component


def _sequence_action(tokens):
    if len(tokens) == 1:
        return tokens[0]
    return Sequence(*tokens)


def _alternative_action(tokens):
    if len(tokens) == 2:
        weight, component = tokens
        if weight < 0:
            raise GrammarError("weight value '%s' is a negative number" % weight)
        return _WeightedComponent(weight, component)
    return tokens[0]


def _alternatives_action(tokens):
    alternatives = list(tokens)
    weighted = [isinstance(a, _WeightedComponent) for a in alternatives]
    if len(alternatives) == 1:
        if weighted[0]:
            raise GrammarError("weights cannot be used outside of alternative "
                               "sets")
        return alternatives[0]

    if not any(weighted):
        return Alternatives(*alternatives)
    if not all(weighted):
        raise GrammarError("either all or none of the alternatives in a set must "
                           "have weights")
    return Alternatives(*[a.component for a in alternatives],
                        weights=[a.weight for a in alternatives])


def get_component_parser():
    """
    Get a pyparsing ParserElement for parsing rule components.

    The following operator precedence rules (highest to lowest) are enforced:
    1. Rule name in angle brackets, a quoted or unquoted token and a tag.
    2. `()' parentheses for grouping and `[]' for optional grouping.
    3. Unary operators (`+', `*' and repeat ranges) apply to the tightest
       immediate preceding component. (To apply them to a sequence or to
       alternatives, use `()' or `[]' grouping.)
    4. Sequence of components.
    5. `|' separated set of alternative components.

    :returns: Forward
    """
    # Make a forward declaration for defining a component. This is necessary for
    # groupings.
    exp = Forward().set_name("expansion")

    # Define some characters that don't appear in the output.
    lpar, rpar, lbrac, rbrac, slash, pipe = map(Suppress, "()[]/|")

    # Define some other characters that do appear in the output.
    star, plus = map(PPLiteral, "*+")

    # Define tokens. Unquoted words are separate tokens.
    token = word.copy().set_parse_action(lambda tokens: Token(tokens[0]))
    quoted = QuotedString('"', esc_char="\\").set_name("quoted token")\
        .set_parse_action(lambda tokens: Token(tokens[0]))

    # Define rule references.
    rule_ref = (langle + optionally_qualified_name.copy() + rangle)\
        .set_name("rule reference").set_parse_action(_reference_action)

    # Escaped brace characters ('\{' or '\}') are allowed in tag text.
    tag = Regex(r"\{(?:[^{}\\]|\\.)*\}", re.UNICODE).set_name("tag")\
        .set_parse_action(_tag_action)

    # Define JSGF weights.
    weight = (slash + pyparsing_common.number + slash)\
        .set_name("alternative weight")

    req = (lpar + exp + rpar).set_name("grouping")
    opt = (lbrac + exp + rbrac).set_name("optional")\
        .set_parse_action(lambda tokens: Optional(tokens[0]))
    atom = (token | quoted | rule_ref | tag | req | opt).set_name("atom")

    # Repeat ranges are tried before rule references after an atom.
    repeat_range = Regex(_repeat_range.pattern).set_name("repeat range")\
        .set_parse_action(_range_action)
    unary = (atom + ZeroOrMore(plus | star | repeat_range))\
        .set_parse_action(_unary_action)

    sequence = unary[1, ...].set_name("sequence")\
        .set_parse_action(_sequence_action)
    alternative = (Opt(weight) + sequence).set_parse_action(_alternative_action)
    alternatives = (alternative + ZeroOrMore(pipe + alternative))\
        .set_parse_action(_alternatives_action)

    # Assign the component definition.
    exp <<= alternatives
    exp.ignore(cpp_style_comment)
    return exp


def get_rule_parser():
    equals = Suppress("=")
    public = CaselessKeyword("public")

    def _make_rule(tokens):
        # Make a Rule object from three tokens.
        scope, name, component = tokens
        return Rule(name, scope, component)

    # Make a parser element for the rule's scope.
    scope = Opt(public).set_parse_action(
        lambda tokens: PUBLIC if tokens else PRIVATE
    )

    # Define the rule parser and set its parse action. Also ignore any C++ style
    # comments around it.
    parser = (scope + langle + base_name.copy() + rangle + equals +
              component_parser + line_delimiter).set_name("rule definition")
    parser.set_parse_action(_make_rule).ignore(cpp_style_comment)
    return parser


def get_grammar_parser():
    # Define keywords.
    grammar_ = Suppress(Keyword("grammar"))
    root_ = Suppress(Keyword("root"))

    # Define parser elements for the grammar header.
    version_no = Regex(r"(v|V)(\d+\.\d+|\d+\.|\.\d+)") \
        .set_name("version number")
    charset_name = Opt(word.copy()).set_name("character set")
    language_name = Opt(word.copy()).set_name("language name")

    header_line = (Suppress(CaselessLiteral("#JSGF")) + version_no("version") +
                   charset_name("charset") + language_name("language") +
                   line_delimiter).set_name("grammar header")

    # Define the grammar name line, root declaration and rule lines. All lines
    # should support C++ style comments (/* comment */ or // comment).
    name_line = (grammar_ + grammar_name("name") + line_delimiter) \
        .set_name("grammar declaration").ignore(cpp_style_comment)
    root_line = (root_ + langle + base_name("root") + rangle + line_delimiter) \
        .set_name("root declaration").ignore(cpp_style_comment)

    parser = (header_line + name_line + Opt(root_line) + ZeroOrMore(rule_parser))
    parser.set_name("grammar").ignore(cpp_style_comment)
    return parser


# Initialise each of the main parsers.
component_parser = get_component_parser()
rule_parser = get_rule_parser()
grammar_parser = get_grammar_parser()


def parse_component_string(s):
    """
    Parse a string containing a rule component and return a ``RuleComponent``
    object.

    :param s: str
    :returns: RuleComponent
    :raises: ParseException, GrammarError
    """
    # Parse the string and return the first (and only) component object that was
    # generated. Pass parse_all=True to catch trailing invalid tokens.
    return component_parser.parse_string(s, parse_all=True)[0]


def parse_rule_string(s):
    """
    Parse a string containing a rule definition and return a ``Rule`` object.

    :param s: str
    :returns: Rule
    :raises: ParseException, GrammarError
    """
    return rule_parser.parse_string(s, parse_all=True)[0]


def parse_grammar_string(s):
    """
    Parse a grammar string and return its rules and attributes.

    The attributes dictionary has the following keys: ``version``, ``charset``,
    ``xml:lang``, ``name`` and, if the grammar declares one, ``root``.

    :param s: str
    :returns: tuple of (list of rules, dict)
    :raises: ParseException, GrammarError
    """
    result = grammar_parser.parse_string(s, parse_all=True)
    charset = result.get("charset", "")
    language = result.get("language", "")

    # Use charset as the language instead if it looks like a locale and no
    # language was specified.
    if not language and _locale.match(charset) and \
            not any(c.isdigit() for c in charset):
        language, charset = charset, ""

    attributes = {
        "version": result["version"][1:],
        "charset": charset,
        "xml:lang": language or None,
        "name": result["name"],
    }
    if "root" in result:
        attributes["root"] = result["root"]

    rules = [token for token in result if isinstance(token, Rule)]
    return rules, attributes


def valid_grammar(s):
    """
    Whether a string is a valid grammar string.

    :param s: str
    :returns: bool
    """
    try:
        parse_grammar_string(s)
        return True
    except (ParseBaseException, GrammarError):
        return False


def parse_grammar_file(path):
    """
    Parse a grammar file and return its rules and attributes.

    :param path: str
    :returns: tuple of (list of rules, dict)
    :raises: ParseException, GrammarError
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    return parse_grammar_string(content)
