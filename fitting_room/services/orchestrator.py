import asyncio
import logging
from dataclasses import dataclass, field

import httpx
from google.genai import errors as genai_errors
from google.genai import types

from fitting_room.config import ViewFailurePolicy
from fitting_room.exceptions import (
    Blocked,
    ContentRejected,
    GenerationError,
    NoImageReturned,
    RemoteCallFailed,
)
from fitting_room.models import GeneratedImage, ImageAsset
from fitting_room.schemas.tryon import VIEW_ORDER, QualityTier, ViewLabel
from fitting_room.services.gemini import GeminiClient
from fitting_room.services.prompts import ERROR_SENTINEL, build_view_prompt

logger = logging.getLogger(__name__)


@dataclass
class ViewOutcome:
    """Result of a single view call: either an image (plus optional note) or an error."""
    view: ViewLabel
    image: GeneratedImage | None = None
    note: str | None = None
    error: GenerationError | None = None


@dataclass
class ViewSet:
    """Successful views of one combination, in canonical view order."""
    views: list[GeneratedImage]
    note: str | None = None
    # Only populated under the partial policy
    failures: list[ViewOutcome] = field(default_factory=list)


def parse_view_response(view: ViewLabel, response: types.GenerateContentResponse) -> ViewOutcome:
    """
    Turn a raw model response into a ViewOutcome.

    A missing candidate list or a prompt block yields Blocked; an ``ERROR:``
    text part yields ContentRejected; no inline image yields NoImageReturned.
    """
    block_reason = None
    if response.prompt_feedback is not None and response.prompt_feedback.block_reason:
        block_reason = response.prompt_feedback.block_reason

    if not response.candidates or block_reason:
        if block_reason:
            reason = getattr(block_reason, "value", str(block_reason))
            return ViewOutcome(
                view=view,
                error=Blocked(f"The request was blocked. Reason: {reason}", reason=reason),
            )
        return ViewOutcome(
            view=view,
            error=Blocked("The model did not return a valid response. Please try again."),
        )

    candidate = response.candidates[0]
    parts = (candidate.content.parts if candidate.content else None) or []

    image: ImageAsset | None = None
    note: str | None = None

    for part in parts:
        if part.text:
            text = part.text.strip()
            if text.startswith(ERROR_SENTINEL):
                message = text[len(ERROR_SENTINEL):].strip()
                return ViewOutcome(view=view, error=ContentRejected(message))
            if note is None:
                note = text
        elif part.inline_data and part.inline_data.data:
            if image is None:
                image = ImageAsset.from_bytes(
                    part.inline_data.data,
                    part.inline_data.mime_type or "image/png",
                )

    if image is None:
        return ViewOutcome(
            view=view,
            error=NoImageReturned(
                f"Could not generate the {view.value}. The model did not return an image."
            ),
        )

    return ViewOutcome(
        view=view,
        image=GeneratedImage(src=image, alt=f"{view.value} of the outfit", label=view),
        note=note,
    )


class GenerationOrchestrator:
    """
    Generates the four views of one (person, outfit, style) combination.

    The four calls run concurrently with a shared seed. Under the
    all-or-nothing policy a single failed view fails the whole combination.
    """

    def __init__(
        self,
        client: GeminiClient,
        policy: ViewFailurePolicy = ViewFailurePolicy.ALL_OR_NOTHING,
    ):
        self.client = client
        self.policy = policy

    async def _generate_single(
        self,
        view: ViewLabel,
        images: list[ImageAsset],
        prompt: str,
        seed: int,
    ) -> ViewOutcome:
        try:
            response = await self.client.generate_view(images, prompt, seed)
        except (genai_errors.APIError, httpx.HTTPError) as e:
            logger.warning(f"[Orchestrator] {view.value} call failed: {e}")
            return ViewOutcome(
                view=view,
                error=RemoteCallFailed(f"Failed to generate the {view.value}: {e}"),
            )
        return parse_view_response(view, response)

    async def generate_views(
        self,
        person: ImageAsset,
        outfit: ImageAsset,
        style: ImageAsset | None,
        instructions: str | None,
        quality: QualityTier,
        seed: int,
    ) -> ViewSet:
        """
        Generate Front, Left side, Right side and Back views.

        Returns:
            ViewSet with the generated images in canonical order and at most
            one informational note.

        Raises:
            GenerationError: the combination failed (first failure in view order)
        """
        images = [person, outfit]
        if style is not None:
            images.append(style)

        tasks = []
        for view in VIEW_ORDER:
            prompt = build_view_prompt(
                view=view,
                quality=quality,
                has_style_reference=style is not None,
                user_instructions=instructions,
                seed=seed,
            )
            tasks.append(self._generate_single(view, images, prompt, seed))

        # gather preserves argument order, so outcomes are already in view order
        outcomes: list[ViewOutcome] = await asyncio.gather(*tasks)

        failures = [outcome for outcome in outcomes if outcome.error is not None]
        successes = [outcome for outcome in outcomes if outcome.image is not None]

        if failures and (self.policy == ViewFailurePolicy.ALL_OR_NOTHING or not successes):
            first = failures[0]
            logger.info(
                f"[Orchestrator] Combination failed on {first.view.value}: {first.error.message}"
            )
            raise first.error

        note = next((outcome.note for outcome in successes if outcome.note), None)

        return ViewSet(
            views=[outcome.image for outcome in successes],
            note=note,
            failures=failures,
        )
