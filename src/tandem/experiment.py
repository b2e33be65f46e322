# Copyright (c) Syntropy Systems
"""Experiment base class and the run protocol."""
from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from typing_extensions import TypeAlias

from tandem.errors import InvalidExperimentError
from tandem.observation import CANDIDATE, CONTROL, Observation
from tandem.result import Result

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

RunContext: TypeAlias = Mapping[str, object]


def make_context(
    context: Mapping[str, object] | None = None,
    **kwargs: object,
) -> RunContext:
    """Build a read-only run context from a mapping and keyword arguments.

    Keyword arguments win over keys of the same name in ``context``.
    """
    data: dict[str, object] = dict(context) if context else {}
    data.update(kwargs)
    return MappingProxyType(data)


class Experiment:
    """A base experiment meant to be subclassed.

    Subclasses must implement ``enabled``, ``control`` and ``candidate``. The
    remaining hooks have defaults and may be overridden selectively; an
    application-wide base class is a good place for ``publish``.

    The per-call context is passed to every hook that needs it instead of
    being stored on the instance, so one experiment can be shared by
    concurrent callers.

    Example:
        >>> class Checkout(Experiment):
        ...     def enabled(self, context):
        ...         return context["user_id"] % 10 == 0
        ...     def control(self, context):
        ...         return legacy_total(context["cart"])
        ...     def candidate(self, context):
        ...         return new_total(context["cart"])
        >>> total = Checkout("checkout-total").run(user_id=30, cart=cart)

    """

    name: str
    randomize_order: bool
    _rng: random.Random

    def __init__(
        self,
        name: str,
        *,
        randomize_order: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize an experiment.

        Args:
            name: Stable identifier used in published records
            randomize_order: Run control and candidate in a random order
            rng: Random source for ordering (defaults to a fresh Random)

        """
        self.name = name
        self.randomize_order = randomize_order
        self._rng = rng or random.Random()  # noqa: S311

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    # Required hooks

    def enabled(self, context: RunContext) -> bool:  # noqa: ARG002
        """Return whether the candidate should run for this call."""
        msg = f"`{type(self).__name__}.enabled` must be implemented in your Experiment class."
        raise InvalidExperimentError(msg)

    def control(self, context: RunContext) -> object:  # noqa: ARG002
        """Return the existing behavior's value. Always run, even when disabled."""
        msg = f"`{type(self).__name__}.control` must be implemented in your Experiment class."
        raise InvalidExperimentError(msg)

    def candidate(self, context: RunContext) -> object:  # noqa: ARG002
        """Return the new behavior's value. Only run when enabled."""
        msg = f"`{type(self).__name__}.candidate` must be implemented in your Experiment class."
        raise InvalidExperimentError(msg)

    # Optional hooks

    def compare(self, control: Observation, candidate: Observation) -> bool:
        """Return whether the two observations match.

        A raised observation never matches. Otherwise values are compared
        with ``==``.
        """
        if control.raised or candidate.raised:
            return False
        return control.value == candidate.value

    def ignore(self, control: Observation, candidate: Observation) -> bool:  # noqa: ARG002
        """Return whether this result should be left out of mismatch reporting."""
        return False

    def raised(self, observation: Observation) -> None:  # noqa: ARG002
        """Called once for each observation whose body raised."""

    def publishable_value(self, observation: Observation) -> object:
        """Transform an observation's value before it is published."""
        return observation.value

    def publish(self, result: Result) -> None:  # noqa: ARG002
        """Publish a completed result. Exceptions raised here reach the caller."""

    def select_observation(self, result: Result, context: RunContext) -> Observation:  # noqa: ARG002
        """Pick the observation whose value ``run`` returns.

        Only called when the experiment is enabled. Returning
        ``result.candidate`` rolls out the new behavior.
        """
        return result.control

    # Run protocol

    def run(
        self,
        context: Mapping[str, object] | None = None,
        /,
        **kwargs: object,
    ) -> object:
        """Run the control, maybe the candidate, publish, and return a value.

        Returns the control's value unless ``select_observation`` picks the
        candidate. If the selected observation raised, its error is raised
        again unchanged. Candidate errors that are not selected never reach
        the caller.

        Args:
            context: Data needed by the hooks for this call
            **kwargs: Extra context entries, merged over ``context``

        """
        run_context = make_context(context, **kwargs)

        if self.randomize_order:
            return self._run_randomized(run_context)

        control = self._observe(CONTROL, self.control, run_context)

        if not self.enabled(run_context):
            logger.debug("Experiment %s disabled, returning control", self.name)
            return self._unwrap(control)

        candidate = self._observe(CANDIDATE, self.candidate, run_context)
        return self._conclude(control, candidate, run_context)

    def _run_randomized(self, context: RunContext) -> object:
        """Run both bodies in a random order.

        ``enabled`` is consulted before either body so the order can be drawn.
        """
        if not self.enabled(context):
            logger.debug("Experiment %s disabled, returning control", self.name)
            return self._unwrap(self._observe(CONTROL, self.control, context))

        hooks: dict[str, Callable[[RunContext], object]] = {
            CONTROL: self.control,
            CANDIDATE: self.candidate,
        }
        order = [CONTROL, CANDIDATE]
        self._rng.shuffle(order)
        logger.debug("Experiment %s running in order %s", self.name, order)

        observations = {name: self._observe(name, hooks[name], context) for name in order}
        return self._conclude(observations[CONTROL], observations[CANDIDATE], context)

    def _observe(
        self,
        name: str,
        hook: Callable[[RunContext], object],
        context: RunContext,
    ) -> Observation:
        observation = Observation.capture(name, self, lambda: hook(context))
        if observation.raised:
            logger.debug(
                "Observation %s raised %s",
                observation.slug,
                type(observation.error).__name__,
                exc_info=observation.error,
            )
            self.raised(observation)
        return observation

    def _conclude(
        self,
        control: Observation,
        candidate: Observation,
        context: RunContext,
    ) -> object:
        result = Result(self, control, candidate)
        self.publish(result)

        selected = self.select_observation(result, context)
        if selected is not control and selected is not candidate:
            msg = (
                f"`{type(self).__name__}.select_observation` must return "
                "the result's control or candidate Observation."
            )
            raise InvalidExperimentError(msg)

        logger.debug("Experiment %s selected %s", self.name, selected.slug)
        return self._unwrap(selected)

    @staticmethod
    def _unwrap(observation: Observation) -> object:
        if observation.error is not None:
            raise observation.error
        return observation.value
