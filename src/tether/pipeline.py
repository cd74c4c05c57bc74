"""ActivationPipeline -- from one tool call to a bounded set of reminders.

Control flow for a single interaction:

1. ContextAnalyzer normalizes the interaction into a TriggerContext.
2. The Scheduler gate decides whether injection happens this turn.
3. The TriggerMatchingEngine ranks trigger-based constraints (or the
   ConstraintSelector picks phase-based ones when a phase and phase
   constraints are supplied).
4. Each score is multiplied by the session's relevance adjustment,
   clamped to 1.0, and the list is re-ranked and re-capped.
5. Activations are written to the audit log (when a repository is
   configured) and then recorded in the SessionContext.

A composition strategy result can then be folded in with
``apply_composition``, which places the governing step first.

The pipeline fails open: any unexpected error produces a decision that
injects nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import TYPE_CHECKING, Any

from tether.matching.context import ContextAnalyzer
from tether.models.trigger import ActivationReason, ConstraintActivation
from tether.scheduler import Scheduler
from tether.selection import ConstraintSelector
from tether.session import SessionStore

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tether.models.composition import StepActivation
    from tether.models.config import TetherConfig
    from tether.models.constraint import Constraint, PhaseConstraint
    from tether.models.trigger import TriggerContext
    from tether.storage.repositories import ActivationRepository
    from tether.triggers.engine import TriggerMatchingEngine
    from tether.triggers.protocols import ConstraintResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InjectionDecision:
    """What the injection layer should render for one interaction."""

    session_id: str
    interaction_number: int
    injected: bool
    context: TriggerContext | None = None
    activations: tuple[ConstraintActivation, ...] = ()
    phase_constraints: tuple[PhaseConstraint, ...] = ()
    composition_step: StepActivation | None = None
    error: str | None = None

    @property
    def constraint_ids(self) -> list[str]:
        ids = [a.constraint_id for a in self.activations]
        ids.extend(c.id for c in self.phase_constraints)
        return ids

    @classmethod
    def skipped(
        cls,
        session_id: str,
        interaction_number: int,
        context: TriggerContext | None = None,
        error: str | None = None,
    ) -> InjectionDecision:
        return cls(
            session_id=session_id,
            interaction_number=interaction_number,
            injected=False,
            context=context,
            error=error,
        )


class ActivationPipeline:
    """Wires analyzer, scheduler, engine, selector and sessions together."""

    def __init__(
        self,
        engine: TriggerMatchingEngine,
        *,
        analyzer: ContextAnalyzer | None = None,
        scheduler: Scheduler | None = None,
        store: SessionStore | None = None,
        selector: ConstraintSelector | None = None,
        activation_repo: ActivationRepository | None = None,
        max_constraints: int | None = None,
    ) -> None:
        self._engine = engine
        self._analyzer = analyzer or ContextAnalyzer(engine.matcher)
        self._scheduler = scheduler or Scheduler()
        self._store = store or SessionStore()
        self._selector = selector or ConstraintSelector()
        self._activation_repo = activation_repo
        self._max_constraints = max_constraints or engine.config.max_active_constraints

    @classmethod
    def from_config(
        cls,
        config: TetherConfig,
        resolver: ConstraintResolver,
        *,
        store: SessionStore | None = None,
        activation_repo: ActivationRepository | None = None,
    ) -> ActivationPipeline:
        """Build every component from one TetherConfig."""
        from tether.matching.keywords import KeywordMatcher
        from tether.triggers.engine import TriggerMatchingEngine

        matcher = KeywordMatcher(
            config.keywords.to_tables(),
            enable_fuzzy=config.matching.enable_fuzzy_matching,
            fuzzy_threshold=config.matching.fuzzy_similarity_threshold,
        )
        engine = TriggerMatchingEngine(resolver, config.matching, matcher)
        return cls(
            engine,
            analyzer=ContextAnalyzer(matcher, config.context_rules),
            scheduler=Scheduler.from_config(config.schedule),
            store=store,
            activation_repo=activation_repo,
            max_constraints=config.schedule.max_constraints_per_injection,
        )

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def process_tool_call(
        self,
        method_name: str,
        parameters: Any,
        session_id: str,
        interaction_number: int,
        *,
        phase: str | None = None,
        phase_constraints: Sequence[Constraint] | None = None,
    ) -> InjectionDecision:
        """Full pipeline for one tool invocation."""
        try:
            session = self._store.get_or_create(session_id)
            session.record_tool_call()
            context = self._analyzer.analyze_tool_call(method_name, parameters, session_id)
            return self._decide(context, session_id, interaction_number, phase, phase_constraints)
        except Exception as exc:
            logger.error(
                "Activation pipeline failed for session %s: %s: %s",
                session_id,
                type(exc).__name__,
                exc,
            )
            return InjectionDecision.skipped(session_id, interaction_number, error=str(exc))

    def process_user_input(
        self,
        text: str,
        session_id: str,
        interaction_number: int,
    ) -> InjectionDecision:
        """Full pipeline for free text typed by the user."""
        try:
            self._store.get_or_create(session_id)
            context = self._analyzer.analyze_user_input(text, session_id)
            return self._decide(context, session_id, interaction_number, None, None)
        except Exception as exc:
            logger.error(
                "Activation pipeline failed for session %s: %s: %s",
                session_id,
                type(exc).__name__,
                exc,
            )
            return InjectionDecision.skipped(session_id, interaction_number, error=str(exc))

    def apply_composition(
        self,
        decision: InjectionDecision,
        step: StepActivation,
    ) -> InjectionDecision:
        """Put a composition strategy's step first, then re-cap.

        Sentinel steps (nothing to surface, or methodology complete)
        leave the decision's activations untouched. A step that was not
        already in the ranked set is recorded like any other injected
        activation; if that fails the decision is returned unchanged.
        """
        if not decision.injected or not step.is_activation or decision.context is None:
            return replace(decision, composition_step=step)

        existing = [a for a in decision.activations if a.constraint_id == step.constraint_id]
        if existing:
            governed = existing[0]
        else:
            governed = ConstraintActivation(
                constraint_id=step.constraint_id,
                confidence_score=1.0,
                reason=ActivationReason.UNKNOWN,
                trigger_context=decision.context,
                timestamp=step.timestamp,
            )
            try:
                self._log_activations([governed], decision.interaction_number)
                self._store.get_or_create(decision.session_id).record_activation(governed)
            except Exception as exc:
                logger.error(
                    "Could not record composition step %s for session %s: %s: %s",
                    step.constraint_id,
                    decision.session_id,
                    type(exc).__name__,
                    exc,
                )
                return decision
        rest = [a for a in decision.activations if a.constraint_id != step.constraint_id]
        ordered = [governed] + rest
        return replace(
            decision,
            activations=tuple(ordered[: self._max_constraints]),
            composition_step=step,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _decide(
        self,
        context: TriggerContext,
        session_id: str,
        interaction_number: int,
        phase: str | None,
        phase_constraints: Sequence[Constraint] | None,
    ) -> InjectionDecision:
        if not self._scheduler.should_inject(interaction_number, phase):
            logger.debug(
                "Session %s interaction %d: cadence skip", session_id, interaction_number
            )
            return InjectionDecision.skipped(session_id, interaction_number, context)

        if phase is not None and phase_constraints is not None:
            selected = self._selector.select_constraints(
                phase_constraints, phase, self._max_constraints
            )
            self._log_phase_selection(selected, context, interaction_number)
            return InjectionDecision(
                session_id=session_id,
                interaction_number=interaction_number,
                injected=bool(selected),
                context=context,
                phase_constraints=tuple(selected),
            )

        activations = self._adjust_for_session(
            self._engine.evaluate_constraints(context), session_id
        )
        # Session history only changes once the audit log write succeeded.
        self._log_activations(activations, interaction_number)
        session = self._store.get_or_create(session_id)
        for activation in activations:
            session.record_activation(activation)

        logger.debug(
            "Session %s interaction %d: %d activations (%s)",
            session_id,
            interaction_number,
            len(activations),
            ", ".join(a.constraint_id for a in activations) or "none",
        )
        return InjectionDecision(
            session_id=session_id,
            interaction_number=interaction_number,
            injected=bool(activations),
            context=context,
            activations=tuple(activations),
        )

    def _adjust_for_session(
        self,
        activations: list[ConstraintActivation],
        session_id: str,
    ) -> list[ConstraintActivation]:
        session = self._store.get_or_create(session_id)
        adjusted = [
            a.with_confidence(
                min(a.confidence_score * session.session_relevance_adjustment(a.constraint_id), 1.0)
            )
            for a in activations
        ]
        adjusted.sort(key=lambda a: a.confidence_score, reverse=True)
        return adjusted[: self._max_constraints]

    def _log_activations(
        self, activations: list[ConstraintActivation], interaction_number: int
    ) -> None:
        if self._activation_repo is None:
            return
        from tether.storage.schema import ActivationLogRow

        for activation in activations:
            self._activation_repo.save_entry(
                ActivationLogRow(
                    session_id=activation.trigger_context.session_id or "",
                    constraint_id=activation.constraint_id,
                    confidence=activation.confidence_score,
                    reason=activation.reason.value,
                    context_type=activation.context_type,
                    interaction_number=interaction_number,
                    created_at=datetime.now(),
                )
            )

    def _log_phase_selection(
        self,
        selected: list[PhaseConstraint],
        context: TriggerContext,
        interaction_number: int,
    ) -> None:
        if self._activation_repo is None:
            return
        from tether.storage.schema import ActivationLogRow

        for constraint in selected:
            self._activation_repo.save_entry(
                ActivationLogRow(
                    session_id=context.session_id or "",
                    constraint_id=constraint.id,
                    confidence=float(constraint.priority),
                    reason="phase",
                    context_type=context.context_type,
                    interaction_number=interaction_number,
                    created_at=datetime.now(),
                )
            )
