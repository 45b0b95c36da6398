"""Validator base class.

A validator is a function object: calling it with a ValidationContext
returns a RuleOutcome. Validators are built once, when the rule catalog is
assembled, and hold only immutable configuration, so the same instance is
safe to share between runs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from dansbag_cli.validation.context import ValidationContext
from dansbag_cli.validation.results import RuleOutcome


class Validator(ABC):
    """Base class for all validators.

    Subclasses must implement:
        check(): Run the validation and return an outcome

    Subclasses may raise FatalValidationError from check() when the
    subject cannot be evaluated at all.
    """

    @abstractmethod
    def check(self, ctx: ValidationContext) -> RuleOutcome:
        """Run this validator against one bag.

        Args:
            ctx: The run's context.

        Returns:
            SUCCESS or VIOLATION.
        """
        ...

    def __call__(self, ctx: ValidationContext) -> RuleOutcome:
        return self.check(ctx)

    def _success(self) -> RuleOutcome:
        """Helper to create a passing outcome."""
        return RuleOutcome.success()

    def _violation(self, *messages: str) -> RuleOutcome:
        """Helper to create a failing outcome."""
        return RuleOutcome.violation(messages)

    def _collect(self, messages: Iterable[str]) -> RuleOutcome:
        """SUCCESS for no messages, otherwise one VIOLATION holding all of them."""
        return RuleOutcome.from_messages(messages)
