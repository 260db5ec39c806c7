"""
Example demonstrating tags, repetition and the parses returned by matching.
"""

from rulegrammar import (Alternatives, Count, PrivateRule, PublicRule, Reference,
                         RuleGrammar, RuleParse, Sequence, Tag, filter_component)


def main():
    # Define an open/close file rule with tags.
    cmd = PublicRule("command", Sequence(
        Alternatives(Sequence("open", Tag("OPEN")), Sequence("close", Tag("CLOSE"))),
        Count(Reference("file"), 1, 3)
    ))
    files = PrivateRule("file", Alternatives("readme", "setup", "license"))

    # Print the tags of the 'command' rule.
    print("Tags: %s\n" % cmd.tags)

    # Initialise a new grammar and add the rules to it.
    g = RuleGrammar("files")
    g.add_rules(cmd, files)
    g.commit_changes()

    # Print the compiled grammar.
    print("Compiled grammar is:\n%s" % g.compile())

    # The parse records which alternative and how many repetitions matched.
    speech = "open readme setup"
    parse = g.match(speech)
    print("Tags matching '%s' are: %s" % (speech, parse.tags))
    referenced = filter_component(parse.parse, lambda x: isinstance(x, RuleParse))
    print("Files: %s" % [r.tokens for r in referenced])

    # Wildcards match any single word.
    print("Wildcard parse: %s" % g.match("close * license"))


if __name__ == '__main__':
    main()
