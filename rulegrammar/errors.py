"""
This module contains rulegrammar's exception classes.
"""


class GrammarError(Exception):
    """
    Error raised when invalid grammar operations occur.

    This error is raised under the following circumstances:

    * Using an invalid name (such as *NULL* or *VOID*) for a grammar reference,
      rule name or rule reference.
    * Committing an operation that refers to a rule that isn't in the grammar.
    * Committing a rule whose name is already taken by a different rule.
    * Setting a *PRIVATE* rule as the root rule or changing its activation.
    * Compiling a rule that references an unknown rule or grammar, or one that
      references itself directly or indirectly.
    * Matching against an unknown rule name, or matching without a rule name
      when the grammar has no root rule.
    * Passing a grammar string with an illegal expansion to a parser function,
      such as a weight outside of an alternative set.
    """


class CommitError(GrammarError):
    """
    Error raised by ``RuleGrammar.commit_changes`` when one or more queued
    operations failed.

    Operations that succeeded remain applied. The failures are available, in
    queue order, through the ``errors`` attribute.
    """
    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("%d grammar operation(s) failed: %s"
                         % (len(self.errors),
                            "; ".join(str(e) for e in self.errors)))


class CompilationError(Exception):
    """
    Error raised when compiling an invalid rule component.

    This error is currently only raised if a ``Token`` component is compiled,
    either to text or to a grammar graph, with an empty or whitespace-only
    ``text`` value.
    """
