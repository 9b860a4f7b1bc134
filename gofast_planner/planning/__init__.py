# gofast_planner/planning/__init__.py
"""Plan-generation pipeline: assembly, invocation, validation, materialization."""

from gofast_planner.planning.assembler import (
    ArtifactSelection,
    AssembledPrompt,
    PromptAssembler,
    assemble_prompt,
)
from gofast_planner.planning.extraction import extract_json
from gofast_planner.planning.invoker import GenerationInvoker, RawGenerationOutput
from gofast_planner.planning.materializer import PlanMaterializer, build_training_plan
from gofast_planner.planning.pipeline import PipelineResult, PlanGenerationPipeline
from gofast_planner.planning.validator import ResponseValidator

__all__ = [
    "ArtifactSelection",
    "AssembledPrompt",
    "PromptAssembler",
    "assemble_prompt",
    "extract_json",
    "GenerationInvoker",
    "RawGenerationOutput",
    "ResponseValidator",
    "PlanMaterializer",
    "build_training_plan",
    "PlanGenerationPipeline",
    "PipelineResult",
]
