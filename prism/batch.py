"""Concurrent analysis of many requirement texts.

Each text runs through its own pipeline call as a separate task, bounded by
an ``asyncio.Semaphore``. A failing item never affects its siblings; it comes
back as a ``BatchItemResult`` carrying the error message.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from pydantic import BaseModel, ConfigDict

from prism.analysis.augment import CompletionCapability
from prism.analysis.models import AnalysisResult, GenerationRequest, RequirementText
from prism.config import Config
from prism.pipeline import RequirementPipeline

logger = logging.getLogger(__name__)


class BatchItemResult(BaseModel):
    """Outcome of one item in a batch: a result or an error, never both."""
    model_config = ConfigDict(frozen=True)

    source: str
    result: AnalysisResult | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.result is not None and self.error is None


async def analyze_batch(
    items: Sequence[RequirementText | str],
    request: GenerationRequest | None = None,
    config: Config | None = None,
    capability: CompletionCapability | None = None,
    max_concurrency: int | None = None,
    on_item_done: Callable[[BatchItemResult], None] | None = None,
) -> list[BatchItemResult]:
    """Analyse *items* concurrently and return their outcomes in input order.

    Args:
        items: Requirement texts; plain strings get an ``item-N`` source.
        request: Artifacts to generate for every item.
        config: Analysis and provider settings. Defaults to ``Config()``.
        capability: Completion capability for AI augmentation, if any.
        max_concurrency: Upper bound on in-flight analyses. Defaults to
            ``config.analysis.max_concurrency``.
        on_item_done: Called with each outcome as soon as it is known.

    Returns:
        One ``BatchItemResult`` per input item.

    Task cancellation propagates; no partial list is returned in that case.
    """
    config = config or Config()
    request = request or GenerationRequest()
    limit = config.analysis.max_concurrency if max_concurrency is None else max_concurrency
    if limit < 1:
        raise ValueError(f"max_concurrency must be at least 1, got {limit}")

    requirements = [
        item if isinstance(item, RequirementText) else RequirementText(text=item, source=f"item-{i + 1}")
        for i, item in enumerate(items)
    ]
    if not requirements:
        return []

    pipeline = RequirementPipeline(config.analysis)
    semaphore = asyncio.Semaphore(limit)
    llm_config = config.llm if capability is not None else None

    async def _analyze_item(requirement: RequirementText) -> BatchItemResult:
        async with semaphore:
            try:
                result = await pipeline.analyze_async(requirement, request, capability, llm_config)
                item = BatchItemResult(source=requirement.source, result=result)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Analysis of %s failed: %s", requirement.source, exc)
                item = BatchItemResult(
                    source=requirement.source, error=str(exc) or type(exc).__name__
                )
        if on_item_done is not None:
            on_item_done(item)
        return item

    logger.info("Analysing %d item(s), max %d in parallel", len(requirements), limit)
    tasks = [_analyze_item(r) for r in requirements]
    outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    results: list[BatchItemResult] = []
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            # Only cancellation and interpreter exits get here.
            raise outcome
        results.append(outcome)

    failed_count = sum(1 for r in results if not r.success)
    if failed_count:
        logger.warning("%d of %d item(s) failed", failed_count, len(results))
    return results
