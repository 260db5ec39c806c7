"""
Example use of the GrammarManager.load_grammar method.

The parse_grammar_string, parse_grammar_file, parse_rule_string and
parse_component_string functions are also available if only rule objects are
needed.
"""

from rulegrammar import GrammarManager

manager = GrammarManager()

# Load some grammars from text. The second grammar refers to a rule in the first
# one using a qualified rule reference.
manager.load_grammar(
    None,
    "#JSGF V1.0 UTF-8 en;"
    "grammar com.example.numbers;"
    "public <digit> = one | two | three;"
)
grammar = manager.load_grammar(
    None,
    "#JSGF V1.0 UTF-8 en;"
    "grammar example;"
    "root <call>;"
    "public <call> = call <com.example.numbers.digit>+ {call};"
)

# Print it.
print(grammar)

# Get the parse of "call one two".
parse = manager.match("example", "call one two")
print("Matching rule: %s" % parse.rule_name)

# Tags are also parsed and will work as expected.
print("Matched tags: %s" % parse.tags)
print("Matched tokens: %s" % parse.tokens)
