import unittest

from rulegrammar import *


def make_grammar(*rules):
    grammar = RuleGrammar("test")
    grammar.add_rules(*rules)
    grammar.commit_changes()
    return grammar


def build(component):
    return GraphBuilder(make_grammar(PublicRule("r", component))).build("r")


class Custom(RuleComponent):
    def compile(self):
        return "custom"


class GraphShapeCase(unittest.TestCase):
    def assert_arcs(self, graph, index, arcs):
        self.assertEqual(graph[index].arcs, arcs)

    def test_token(self):
        graph = build("hello")
        self.assertEqual([n.kind for n in graph], [
            NodeKind.START_REFERENCE, NodeKind.TOKEN, NodeKind.END_REFERENCE
        ])
        self.assertEqual((graph.start, graph.end), (0, 2))
        self.assert_arcs(graph, 0, [1])
        self.assert_arcs(graph, 1, [2])
        self.assertEqual(graph[0].component, Reference("r"))
        self.assertEqual(graph[1].component, Token("hello"))

    def test_final_node(self):
        grammar = make_grammar(
            PublicRule("r", Sequence("a", Reference("s", "test"))),
            PrivateRule("s", "b")
        )
        graph = GraphBuilder(grammar).build("r")
        self.assertEqual([n.index for n in graph if n.final], [graph.end])

    def test_sequence(self):
        graph = build(Sequence("a", "b"))
        # 0 START_REFERENCE, 1 START_SEQUENCE, 2 END_SEQUENCE, 3 a, 4 b
        self.assertEqual(graph[1].kind, NodeKind.START_SEQUENCE)
        self.assert_arcs(graph, 1, [3])
        self.assert_arcs(graph, 3, [4])
        self.assert_arcs(graph, 4, [2])
        self.assert_arcs(graph, 2, [5])

    def test_empty_sequence(self):
        graph = build(Sequence())
        self.assertEqual(len(graph), 4)
        self.assert_arcs(graph, 1, [2])

    def test_alternatives(self):
        graph = build(Alternatives("a", "b", "c"))
        # 0 START_REFERENCE, 1 START_ALTERNATIVE, 2 END_ALTERNATIVE, 3-5 tokens
        self.assert_arcs(graph, 1, [3, 4, 5])
        for i in (3, 4, 5):
            self.assert_arcs(graph, i, [2])

    def test_empty_alternatives(self):
        graph = build(Alternatives())
        self.assert_arcs(graph, 1, [])

    def test_tag(self):
        graph = build(Tag("t"))
        self.assertEqual(graph[1].kind, NodeKind.TAG)
        self.assert_arcs(graph, 1, [2])

    def test_optional(self):
        graph = build(Optional("a"))
        # 0 START_REFERENCE, 1 START_COUNT, 2 END_COUNT, 3 a
        self.assert_arcs(graph, 1, [3, 2])
        self.assert_arcs(graph, 3, [2])

    def test_repeat(self):
        graph = build(Repeat("a"))
        self.assert_arcs(graph, 1, [3])
        self.assert_arcs(graph, 3, [2, 3])

    def test_kleene_star(self):
        graph = build(KleeneStar("a"))
        self.assert_arcs(graph, 1, [3, 2])
        self.assert_arcs(graph, 3, [2, 3])

    def test_bounded_count(self):
        graph = build(Count("a", 2, 4))
        # 0 START_REFERENCE, 1 START_COUNT, 2 END_COUNT, 3-6 copies of a
        self.assertEqual(len(graph), 8)
        self.assert_arcs(graph, 1, [3])
        self.assert_arcs(graph, 3, [4])
        self.assert_arcs(graph, 4, [5, 2])
        self.assert_arcs(graph, 5, [6, 2])
        self.assert_arcs(graph, 6, [2])

    def test_unbounded_count(self):
        graph = build(Count("a", 3))
        # 0 START_REFERENCE, 1 START_COUNT, 2 END_COUNT, 3-5 copies of a
        self.assert_arcs(graph, 3, [4])
        self.assert_arcs(graph, 4, [5])
        self.assert_arcs(graph, 5, [2, 5])

    def test_zero_count(self):
        graph = build(Count("a", 0, 0))
        self.assertEqual(len(graph), 4)
        self.assert_arcs(graph, 1, [2])

    def test_reference(self):
        grammar = make_grammar(PublicRule("r", Reference("s")),
                               PrivateRule("s", "yes"))
        graph = GraphBuilder(grammar).build("r")
        self.assertEqual([n.kind for n in graph], [
            NodeKind.START_REFERENCE, NodeKind.START_REFERENCE,
            NodeKind.END_REFERENCE, NodeKind.TOKEN, NodeKind.END_REFERENCE
        ])
        self.assertEqual(graph[1].component, Reference("s"))
        self.assertFalse(graph[2].final)
        self.assert_arcs(graph, 1, [3])
        self.assert_arcs(graph, 3, [2])
        self.assert_arcs(graph, 2, [4])


class GraphErrorCase(unittest.TestCase):
    def test_unknown_rule(self):
        builder = GraphBuilder(make_grammar(PublicRule("r", "a")))
        self.assertRaises(GrammarError, builder.build, "missing")

    def test_unknown_reference(self):
        self.assertRaises(GrammarError, build, Reference("missing"))
        self.assertRaises(GrammarError, build, Reference("x", "other"))

    def test_direct_recursion(self):
        self.assertRaises(GrammarError, build, Sequence("a", Reference("r")))

    def test_indirect_recursion(self):
        grammar = make_grammar(PublicRule("a", Sequence("x", Reference("b"))),
                               PrivateRule("b", Optional(Reference("a"))))
        builder = GraphBuilder(grammar)
        self.assertRaises(GrammarError, builder.build, "a")
        self.assertRaises(GrammarError, builder.build, "b")

    def test_repeated_reference_is_not_recursion(self):
        grammar = make_grammar(
            PublicRule("a", Sequence(Reference("b"), Reference("b"))),
            PrivateRule("b", Repeat(Reference("c"))),
            PrivateRule("c", "x")
        )
        graph = GraphBuilder(grammar).build("a")
        self.assertEqual(len([n for n in graph if n.kind == NodeKind.TOKEN]), 2)

    def test_empty_token(self):
        self.assertRaises(CompilationError, build, Token(" "))
        self.assertRaises(CompilationError, build, Sequence("a", Token("")))

    def test_unknown_component_type(self):
        self.assertRaises(TypeError, build, Custom())
        self.assertRaises(TypeError, build,
                          RuleParse(Reference("r"), Token("a")))


class SnapshotPinningCase(unittest.TestCase):
    def test_builder_uses_one_version(self):
        grammar = make_grammar(PublicRule("r", Reference("s")),
                               PrivateRule("s", "old"))
        builder = GraphBuilder(grammar)

        grammar.remove_rule("s")
        grammar.add_rule(PrivateRule("s", "new"))
        grammar.commit_changes()

        graph = builder.build("r")
        self.assertEqual(graph[3].component, Token("old"))

        graph = GraphBuilder(grammar).build("r")
        self.assertEqual(graph[3].component, Token("new"))


class QualifiedReferenceCase(unittest.TestCase):
    def setUp(self):
        self.manager = GrammarManager()
        numbers = self.manager.create_grammar("numbers")
        numbers.add_rule(PrivateRule("digit", Alternatives("one", "two")))
        numbers.commit_changes()
        self.commands = self.manager.create_grammar("commands")
        self.commands.add_rule(PublicRule("call", Sequence(
            "call", Reference("digit", "numbers")
        )))
        self.commands.commit_changes()

    def test_resolved_through_manager(self):
        graph = GraphBuilder(self.commands).build("call")
        tokens = [n.component for n in graph if n.kind == NodeKind.TOKEN]
        self.assertEqual(tokens, [Token("call"), Token("one"), Token("two")])

    def test_explicit_manager(self):
        grammar = RuleGrammar("standalone")
        grammar.add_rule(PublicRule("r", Reference("digit", "numbers")))
        grammar.commit_changes()
        self.assertRaises(GrammarError, GraphBuilder(grammar).build, "r")
        graph = GraphBuilder(grammar, self.manager).build("r")
        self.assertEqual(len(graph), 8)

    def test_unknown_grammar(self):
        self.manager.delete_grammar("numbers")
        self.assertRaises(GrammarError, GraphBuilder(self.commands).build,
                          "call")


if __name__ == '__main__':
    unittest.main()
