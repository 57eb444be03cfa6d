"""Pre-flight validation of desired provisioned concurrency."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from .exceptions import CapacityValidationFailed
from .manifest import DEFAULT_MARGIN_PERCENT
from .models import FunctionTarget, ValidationFailure


def resolve_ceiling(target: FunctionTarget) -> int | None:
    """The explicit override if set, otherwise the function's reserved concurrency."""
    if target.reserved_ceiling is not None:
        return target.reserved_ceiling
    return target.reserved_concurrency


class CapacityValidator:
    """
    Checks desired capacity against the reserved ceiling and a safety margin.

    ``max_allowed = floor(ceiling * margin / 100)``; a target passes when
    its desired capacity is at most ``max_allowed``, or when no ceiling is
    known at all.
    """

    def __init__(
        self,
        margin_percent: int = DEFAULT_MARGIN_PERCENT,
        name_for: Callable[[str], str] | None = None,
    ) -> None:
        if margin_percent < 0:
            raise ValueError("margin_percent must be >= 0")
        self.margin_percent = margin_percent
        self._name_for = name_for or (lambda name: name)

    def max_allowed(self, ceiling: int) -> int:
        # Integer arithmetic keeps floor() exact
        return (ceiling * self.margin_percent) // 100

    def validate(
        self, target: FunctionTarget, ceiling: int | None = None
    ) -> ValidationFailure | None:
        """
        Validate one target.

        Args:
            target: The declared target
            ceiling: Ceiling to check against (default: resolved from the target)

        Returns:
            A ValidationFailure, or None if the target passes
        """
        if ceiling is None:
            ceiling = resolve_ceiling(target)
        if ceiling is None or target.desired_capacity is None:
            return None

        max_allowed = self.max_allowed(ceiling)
        if target.desired_capacity <= max_allowed:
            return None

        return ValidationFailure(
            function_name=self._name_for(target.name),
            desired=target.desired_capacity,
            ceiling=ceiling,
            max_allowed=max_allowed,
            margin_percent=self.margin_percent,
        )

    def collect(self, targets: Iterable[FunctionTarget]) -> list[ValidationFailure]:
        failures = []
        for target in targets:
            failure = self.validate(target)
            if failure is not None:
                failures.append(failure)
        return failures

    def validate_all(self, targets: Iterable[FunctionTarget], scope: str | None = None) -> None:
        """
        Validate a whole batch before anything is applied.

        Raises:
            CapacityValidationFailed: Listing every offending function
        """
        failures = self.collect(targets)
        if failures:
            raise CapacityValidationFailed(failures, scope=scope)
