import unittest

from rulegrammar import *


class Compilation(unittest.TestCase):
    def test_token(self):
        self.assertEqual(Token("hello").compile(), "hello")
        self.assertEqual(Token("don't").compile(), "don't")
        self.assertEqual(Token("new york").compile(), '"new york"')
        self.assertEqual(Token("say \"hi\"").compile(), '"say \\"hi\\""')

    def test_empty_token(self):
        self.assertRaises(CompilationError, Token("").compile)
        self.assertRaises(CompilationError, Token("  ").compile)

    def test_reference(self):
        self.assertEqual(Reference("greet").compile(), "<greet>")
        self.assertEqual(Reference("digit", "com.example.numbers").compile(),
                         "<com.example.numbers.digit>")

    def test_alternatives(self):
        self.assertEqual(Alternatives("a").compile(), "(a)")
        self.assertEqual(Alternatives("a", "b").compile(), "(a|b)")
        self.assertEqual(Alternatives(Sequence("a", "b"), "c").compile(),
                         "(a b|c)")
        self.assertEqual(Alternatives().compile(), "<VOID>")

    def test_weighted_alternatives(self):
        e = Alternatives("a", "b", weights=[2, 0.5])
        self.assertEqual(e.compile(), "(/2.0000/ a|/0.5000/ b)")

    def test_sequence(self):
        self.assertEqual(Sequence("a", "b").compile(), "a b")
        self.assertEqual(Sequence(Sequence("a", "b"), "c").compile(), "(a b) c")
        self.assertEqual(Sequence().compile(), "<NULL>")
        self.assertEqual(Sequence("a", Sequence()).compile(), "a <NULL>")

    def test_counts(self):
        self.assertEqual(Optional("a").compile(), "[a]")
        self.assertEqual(Optional(Sequence("a", "b")).compile(), "[a b]")
        self.assertEqual(Repeat("a").compile(), "a+")
        self.assertEqual(KleeneStar(Sequence("a", "b")).compile(), "(a b)*")
        self.assertEqual(Count("a", 2, 4).compile(), "a<2-4>")
        self.assertEqual(Count("a", 2).compile(), "a<2->")
        self.assertEqual(Count("a", 3, 3).compile(), "a<3>")
        self.assertEqual(Repeat(Optional("a")).compile(), "([a])+")
        self.assertEqual(Repeat(Alternatives("a", "b")).compile(), "(a|b)+")

    def test_tag(self):
        self.assertEqual(Tag("greeting").compile(), "{greeting}")
        self.assertEqual(Tag("a {b}").compile(), "{a \\{b\\}}")
        self.assertEqual(Tag("a\\b").compile(), "{a\\\\b}")


class ConstructionTests(unittest.TestCase):
    def test_strings_become_tokens(self):
        e = Sequence("a", Reference("b"))
        self.assertEqual(e.children, (Token("a"), Reference("b")))

    def test_invalid_children(self):
        self.assertRaises(TypeError, Sequence, 1)
        self.assertRaises(TypeError, Alternatives, "a", None)
        self.assertRaises(TypeError, Token, 5)

    def test_invalid_references(self):
        self.assertRaises(GrammarError, Reference, "NULL")
        self.assertRaises(GrammarError, Reference, "VOID")
        self.assertRaises(GrammarError, Reference, "a b")
        self.assertRaises(GrammarError, Reference, "")
        self.assertRaises(GrammarError, Reference, "rule", "bad grammar")

    def test_qualified_name(self):
        self.assertEqual(Reference("a").qualified_name, "a")
        self.assertEqual(Reference("a", "g").qualified_name, "g.a")

    def test_invalid_weights(self):
        self.assertRaises(ValueError, Alternatives, "a", "b", weights=[1])
        self.assertRaises(ValueError, Alternatives, "a", "b", weights=[1, -1])
        self.assertEqual(Alternatives("a", weights=[3]).weights, (3.0,))
        self.assertIsNone(Alternatives("a").weights)

    def test_invalid_counts(self):
        self.assertRaises(ValueError, Count, "a", -1, 2)
        self.assertRaises(ValueError, Count, "a", 3, 2)
        self.assertRaises(ValueError, Count, "a", 0, 1, -0.5)

    def test_count_properties(self):
        e = Count("a", 1, 3, 0.5)
        self.assertEqual(e.child, Token("a"))
        self.assertEqual(e.min_repeat, 1)
        self.assertEqual(e.max_repeat, 3)
        self.assertEqual(e.repeat_probability, 0.5)
        self.assertFalse(e.indefinite)
        self.assertTrue(Repeat("a").indefinite)
        self.assertIs(KleeneStar("a").max_repeat, REPEAT_INDEFINITELY)

    def test_token_words(self):
        self.assertEqual(Token("new  york").words, ("new", "york"))
        self.assertEqual(Token(" ").words, ())


class Comparisons(unittest.TestCase):
    def test_tokens(self):
        self.assertEqual(Token("a"), Token("a"))
        self.assertNotEqual(Token("a"), Token("A"))
        self.assertNotEqual(Token("a"), Tag("a"))

    def test_ordered_children(self):
        self.assertEqual(Sequence("a", "b"), Sequence("a", "b"))
        self.assertNotEqual(Sequence("a", "b"), Sequence("b", "a"))
        self.assertNotEqual(Alternatives("a", "b"), Alternatives("b", "a"))
        self.assertNotEqual(Sequence("a", "b"), Alternatives("a", "b"))

    def test_weights(self):
        self.assertEqual(Alternatives("a", "b", weights=[1, 2]),
                         Alternatives("a", "b", weights=[1.0, 2.0]))
        self.assertNotEqual(Alternatives("a", "b", weights=[1, 2]),
                            Alternatives("a", "b"))

    def test_count_subclasses(self):
        self.assertEqual(Optional("a"), Count("a", 0, 1))
        self.assertEqual(Repeat("a"), Count("a", 1))
        self.assertEqual(KleeneStar("a"), Count("a", 0))
        self.assertNotEqual(Optional("a"), KleeneStar("a"))
        self.assertNotEqual(Count("a", 0, 1, 0.5), Optional("a"))

    def test_references(self):
        self.assertEqual(Reference("a"), Reference("a"))
        self.assertNotEqual(Reference("a"), Reference("a", "g"))

    def test_hashing(self):
        self.assertEqual(hash(Sequence("a", "b")), hash(Sequence("a", "b")))
        self.assertEqual(hash(Optional("a")), hash(Count("a", 0, 1)))
        self.assertEqual(hash(Tag("x")), hash(Tag("x")))
        components = {Token("a"), Token("a"), Reference("a"), Tag("a")}
        self.assertEqual(len(components), 3)


class TraversalTests(unittest.TestCase):
    def setUp(self):
        self.e = Sequence("a", Alternatives("b", Tag("t")), Optional("c"))

    def test_flat_map(self):
        self.assertEqual(flat_map_component(self.e), [
            self.e, Token("a"), Alternatives("b", Tag("t")), Token("b"), Tag("t"),
            Optional("c"), Token("c")
        ])

    def test_post_order(self):
        result = flat_map_component(self.e, order=TraversalOrder.PostOrder)
        self.assertEqual(result[0], Token("a"))
        self.assertEqual(result[-1], self.e)

    def test_filter(self):
        self.assertEqual(
            filter_component(self.e, lambda x: isinstance(x, Token)),
            [Token("a"), Token("b"), Token("c")]
        )

    def test_find(self):
        self.assertEqual(find_component(self.e, lambda x: isinstance(x, Tag)),
                         Tag("t"))
        self.assertIsNone(find_component(self.e, lambda x: x == Token("z")))

    def test_contains(self):
        self.assertIn(Token("c"), self.e)
        self.assertNotIn(Token("z"), self.e)

    def test_invalid_order(self):
        self.assertRaises(ValueError, map_component, self.e, order=5)


class RuleParseTests(unittest.TestCase):
    def setUp(self):
        self.parse = RuleParse(Reference("greet"), Sequence(
            Token("hello"), Tag("greeting"),
            RuleParse(Reference("name"), Sequence(Token("mary"), Tag("person")))
        ))

    def test_properties(self):
        self.assertEqual(self.parse.rule_name, "greet")
        self.assertIsNone(self.parse.grammar_reference)
        self.assertEqual(self.parse.reference, Reference("greet"))
        self.assertIs(self.parse.component, self.parse.parse)

    def test_tags(self):
        self.assertEqual(self.parse.tags, ["greeting", "person"])

    def test_tokens(self):
        self.assertEqual(self.parse.tokens, ["hello", "mary"])

    def test_compile(self):
        self.assertEqual(self.parse.compile(), "hello {greeting} mary {person}")

    def test_invalid_reference(self):
        self.assertRaises(TypeError, RuleParse, "greet", Token("hello"))

    def test_equality(self):
        self.assertEqual(RuleParse(Reference("a"), Token("x")),
                         RuleParse(Reference("a"), Token("x")))
        self.assertNotEqual(RuleParse(Reference("a"), Token("x")),
                            RuleParse(Reference("b"), Token("x")))


if __name__ == '__main__':
    unittest.main()
