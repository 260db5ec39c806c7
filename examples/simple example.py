from rulegrammar import PublicRule, RuleGrammar, Sequence


def main():
    # Create a public rule with the name 'hello' that matches the words 'hello'
    # and 'world'.
    rule = PublicRule("hello", Sequence("hello", "world"))

    # Create a grammar, queue the new rule and commit it. Changes to a grammar
    # are not visible until they are committed.
    grammar = RuleGrammar("example")
    grammar.add_rule(rule)
    grammar.commit_changes()

    # Compile the grammar using compile().
    # Compilation is not required for matching.
    print(grammar.compile())

    # Match 'hello world' against the grammar's root rule, which is the first
    # public rule by default.
    parse = grammar.match("hello world")
    print("Matching rule: %s" % parse.rule_name)
    print("Parse: %s" % parse)


if __name__ == '__main__':
    main()
