# gofast_planner/planning/pipeline.py
"""
Plan-generation pipeline orchestrator.

Runs Registry -> Assembler -> Invoker -> Validator -> Materializer -> PlanStore
for one request. Each stage fails closed: nothing is persisted unless every
earlier stage succeeded, and the final write is a single transaction.
"""

import logging
from dataclasses import dataclass

from gofast_planner.errors import MaterializationError, PlannerError
from gofast_planner.models.plans import GenerationContext, TrainingPlan, ValidatedPlan
from gofast_planner.models.store import ConfigRegistry, PlanStore, RaceRegistry
from gofast_planner.planning.assembler import ArtifactSelection, PromptAssembler
from gofast_planner.planning.invoker import GenerationInvoker
from gofast_planner.planning.materializer import PlanMaterializer
from gofast_planner.planning.validator import ResponseValidator

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """
    Result of one pipeline run.

    Attributes:
        success: Whether the plan was generated and persisted
        plan_id: Id of the persisted plan (if success=True)
        plan: The persisted TrainingPlan (if success=True)
        validated: The ValidatedPlan (set once validation passed)
        fingerprint: SHA-256 of the assembled prompt (once assembled)
        failed_stage: Stage that failed (if success=False)
        error: Typed error (if success=False)
    """

    success: bool
    plan_id: str | None = None
    plan: TrainingPlan | None = None
    validated: ValidatedPlan | None = None
    fingerprint: str | None = None
    failed_stage: str | None = None
    error: PlannerError | None = None


class PlanGenerationPipeline:
    """
    Wires the pipeline stages to their collaborators.

    The pipeline holds no per-request state, so one instance serves
    concurrent requests.
    """

    def __init__(
        self,
        registry: ConfigRegistry,
        races: RaceRegistry,
        plans: PlanStore,
        invoker: GenerationInvoker,
        validator: ResponseValidator | None = None,
    ):
        self._assembler = PromptAssembler(registry)
        self._invoker = invoker
        self._validator = validator or ResponseValidator()
        self._materializer = PlanMaterializer(races)
        self._plans = plans

    async def execute(
        self,
        athlete_id: str,
        selection: ArtifactSelection,
        context: GenerationContext,
    ) -> PipelineResult:
        """
        Generate, validate and persist one training plan.

        Args:
            athlete_id: Owner of the resulting plan
            selection: Ids of the Role, RuleSet, MustHaves and ReturnFormat
            context: Race facts, goal time and plan skeleton inputs

        Returns:
            PipelineResult with the persisted plan or the failing stage and error
        """
        logger.info(f"Starting plan generation for athlete={athlete_id} race={context.race_id}")
        stage = "assemble"
        fingerprint = None
        validated = None
        try:
            prompt = await self._assembler.assemble(selection, context)
            fingerprint = prompt.fingerprint

            stage = "generate"
            raw = await self._invoker.invoke(prompt)

            stage = "validate"
            validated = self._validator.validate(
                raw.text, prompt.return_format, prompt.must_haves, context
            )

            stage = "materialize"
            training_plan = await self._materializer.materialize(validated, context, athlete_id)

            stage = "persist"
            try:
                plan_id = await self._plans.create(training_plan)
            except PlannerError:
                raise
            except Exception as e:
                logger.error(f"Plan persistence failed: {e}", exc_info=True)
                raise MaterializationError(f"Failed to persist plan: {e}") from e

        except PlannerError as e:
            logger.warning(f"Plan generation failed at stage '{stage}': {e}")
            return PipelineResult(
                success=False,
                validated=validated,
                fingerprint=fingerprint,
                failed_stage=stage,
                error=e,
            )

        training_plan.plan_id = plan_id
        logger.info(f"Plan {plan_id} created for athlete={athlete_id}")
        return PipelineResult(
            success=True,
            plan_id=plan_id,
            plan=training_plan,
            validated=validated,
            fingerprint=fingerprint,
        )
