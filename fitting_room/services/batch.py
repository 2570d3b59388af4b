import logging
import random
from dataclasses import dataclass
from typing import AsyncIterator

from fitting_room.exceptions import BatchAlreadyRunning, GenerationError, MissingInput
from fitting_room.models import ImageAsset, ResultGroup
from fitting_room.schemas.tryon import QualityTier
from fitting_room.services.orchestrator import GenerationOrchestrator
from fitting_room.services.session import TryOnSession

logger = logging.getLogger(__name__)

MAX_SEED = 2**31 - 1

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred while generating images. Please try again."


@dataclass(frozen=True)
class Combination:
    """One (outfit, optional style) pairing, with 0-based positions for labelling."""
    outfit: ImageAsset
    outfit_index: int
    style: ImageAsset | None = None
    style_index: int | None = None

    @property
    def label(self) -> str:
        label = f"Outfit {self.outfit_index + 1}"
        if self.style_index is not None:
            label += f" with style {self.style_index + 1}"
        return label


def build_combinations(
    outfits: list[ImageAsset], styles: list[ImageAsset]
) -> list[Combination]:
    """Outfit-major cross product with styles, or one combination per outfit."""
    if not styles:
        return [Combination(outfit=outfit, outfit_index=i) for i, outfit in enumerate(outfits)]

    return [
        Combination(outfit=outfit, outfit_index=i, style=style, style_index=j)
        for i, outfit in enumerate(outfits)
        for j, style in enumerate(styles)
    ]


class BatchCoordinator:
    """
    Drives the orchestrator over every combination of a session, one at a time.

    Each successful combination is appended to the session and yielded
    immediately. Failures are collected into a newline-joined error text and
    never abort the batch. One coordinator handles one batch.
    """

    def __init__(self, orchestrator: GenerationOrchestrator, rng: random.Random | None = None):
        self.orchestrator = orchestrator
        self.rng = rng or random.Random()
        self.errors: list[str] = []
        self.seeds: list[int] = []

    @property
    def error(self) -> str | None:
        return "\n".join(self.errors) if self.errors else None

    def validate(self, session: TryOnSession) -> None:
        """Raise before any remote work if the batch cannot start."""
        if session.is_generating:
            raise BatchAlreadyRunning("A try-on is already in progress for this session.")
        if session.person_image is None or not session.outfit_images:
            raise MissingInput("Please upload your photo and at least one outfit image.")

    async def run(
        self,
        session: TryOnSession,
        instructions: str | None,
        quality: QualityTier,
    ) -> AsyncIterator[ResultGroup]:
        """
        Generate every combination sequentially, yielding result groups as they finish.

        Raises:
            MissingInput: no person photo or no outfit images
            BatchAlreadyRunning: the session already has a batch in flight
        """
        self.validate(session)

        person = session.person_image
        combinations = build_combinations(session.outfit_images, session.style_images)
        epoch = session.epoch

        session.results = []
        session.error = None
        session.info = None
        session.is_generating = True

        logger.info(
            f"[Batch] Session {session.id}: {len(combinations)} combination(s), quality={quality.value}"
        )

        try:
            for combination in combinations:
                seed = self.rng.randint(0, MAX_SEED)
                self.seeds.append(seed)

                try:
                    view_set = await self.orchestrator.generate_views(
                        person=person,
                        outfit=combination.outfit,
                        style=combination.style,
                        instructions=instructions,
                        quality=quality,
                        seed=seed,
                    )
                except GenerationError as e:
                    self.errors.append(f"{combination.label}: {e.message}")
                    view_set = None
                except Exception:
                    logger.exception(f"[Batch] Unexpected error on {combination.label}")
                    self.errors.append(f"{combination.label}: {UNEXPECTED_ERROR_MESSAGE}")
                    view_set = None

                if not session.is_current(epoch):
                    logger.info(f"[Batch] Session {session.id} was reset, dropping remaining work")
                    return

                if view_set is not None:
                    for failure in view_set.failures:
                        self.errors.append(
                            f"{combination.label}, {failure.view.value}: {failure.error.message}"
                        )

                session.error = self.error

                if view_set is None or not view_set.views:
                    continue

                group = ResultGroup(
                    outfit_image=combination.outfit,
                    style_image=combination.style,
                    views=view_set.views,
                    info=view_set.note,
                )
                session.results.append(group)
                if session.info is None and group.info:
                    session.info = group.info
                logger.info(f"[Batch] {combination.label} -> result {group.id}")
                yield group
        finally:
            if session.is_current(epoch):
                session.is_generating = False

        logger.info(
            f"[Batch] Session {session.id} finished: "
            f"{len(session.results)} result(s), {len(self.errors)} error(s)"
        )
