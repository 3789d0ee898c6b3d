"""Daily macro targets."""
from __future__ import annotations

from typing import List

from ai_pipeline import AIRequestPipeline
from prompts import create_macro_targets_prompt
from schemas import MacroTarget, PersonalData, ResponseCategory


async def generate_macro_targets(
    pipeline: AIRequestPipeline, profile: PersonalData, tdee: float
) -> List[MacroTarget]:
    """One MACRO_SET request; the normalized targets are returned as-is."""
    result = await pipeline.execute(
        create_macro_targets_prompt(profile, tdee), ResponseCategory.MACRO_SET
    )
    return list(result.macro_targets)
