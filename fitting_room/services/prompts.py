"""
Prompt construction for the try-on image model and the video model.

Everything here is a pure function of its arguments: no I/O, no failure modes.
"""

from fitting_room.schemas.tryon import QualityTier, ViewLabel
from fitting_room.schemas.video import AnimationType, VideoDuration

ERROR_SENTINEL = "ERROR:"

FULL_BODY_ADVISORY = (
    "For a more accurate full-body try-on, please provide an image that shows your entire body."
)

QUALITY_PREAMBLES = {
    QualityTier.STANDARD: (
        "You are a virtual try-on assistant. Generate a high-quality, photorealistic image "
        "of the person from the first image wearing the outfit from the second image."
    ),
    QualityTier.HIGH: (
        "You are an expert virtual try-on assistant. Generate a high-resolution, highly "
        "detailed photorealistic image of the person from the first image wearing the outfit "
        "from the second image. The result must be indistinguishable from a real photograph."
    ),
    QualityTier.ULTRA: (
        "You are a world-class virtual try-on assistant. Generate an ultra-high-resolution, "
        "4K-quality photorealistic image of the person from the first image wearing the outfit "
        "from the second image, with fine fabric texture and studio-grade lighting. The result "
        "must be indistinguishable from professional photography."
    ),
}

STYLE_REFERENCE_CLAUSE = (
    "**Style reference:** The third image is a style reference. Apply its texture, pattern "
    "and colour treatment to the outfit from the second image. Do not replace the outfit "
    "itself: keep its cut, silhouette and construction."
)

FIDELITY_MANDATE = (
    "**Outfit fidelity:** Reproduce the outfit's original design faithfully. Do not alter "
    "logos, prints, patterns or text on the garment unless the instructions above ask for it."
)

CONSISTENCY_MANDATE = (
    "**Consistency:** This image is one of a set of views generated with the same seed. "
    "Keep the person's identity, facial features, hairstyle, skin tone and every outfit "
    "detail exactly the same across all views of the set. Use a simple, neutral, light-gray "
    "studio background in every view."
)

REQUIREMENTS = (
    "**Requirements:**\n"
    "- **Fit:** The outfit must be fitted naturally onto the user's body shape and posture.\n"
    "- **Realism:** Maintain realistic fabric textures, shadows, and lighting.\n"
    "- **Preservation:** Do not change the person's identity.\n"
    "- **Quality:** The image must look like a real photograph, not a digital overlay."
)

ERROR_HANDLING = (
    "**Error Handling:**\n"
    f"- If the outfit in the second image is unclear or low-quality, respond with only the text: "
    f'"{ERROR_SENTINEL} The provided outfit image is unclear. Please upload a higher-quality '
    f'image for better results."\n'
    f"- If the person in the first image does not show a full body, generate the try-on for "
    f"the visible parts of the body and in the text response, politely mention: "
    f'"{FULL_BODY_ADVISORY}"'
)

ANIMATION_DESCRIPTIONS = {
    AnimationType.TURN_360: (
        "perform a slow, smooth 360-degree turn on the spot, showing the outfit from every angle"
    ),
    AnimationType.SUBTLE_SWAY: (
        "stand naturally and sway gently from side to side, with subtle weight shifts and relaxed arms"
    ),
    AnimationType.CATWALK_POSE: (
        "strut forward a few steps like a runway model, stop, and strike a confident pose"
    ),
}


def build_view_prompt(
    view: ViewLabel,
    quality: QualityTier,
    has_style_reference: bool,
    user_instructions: str | None,
    seed: int,
) -> str:
    """
    Build the instruction text for one view of one combination.

    All four views of a combination share the seed, so their prompts differ
    only in the view directive.
    """
    parts = [QUALITY_PREAMBLES.get(quality, QUALITY_PREAMBLES[QualityTier.STANDARD])]

    parts.append(f"**View:** Generate a **{view.value}** of the person.")

    if has_style_reference:
        parts.append(STYLE_REFERENCE_CLAUSE)

    instructions = (user_instructions or "").strip()
    if instructions:
        parts.append(f"**Additional instructions from the user:** {instructions}")

    parts.append(REQUIREMENTS)
    parts.append(FIDELITY_MANDATE)
    parts.append(CONSISTENCY_MANDATE)
    parts.append(f"**Series reference:** seed {seed}.")
    parts.append(ERROR_HANDLING)

    return "\n\n".join(parts)


def build_video_prompt(
    animation: AnimationType | None,
    duration: VideoDuration | int,
    aspect_ratio: str,
) -> str:
    """Build the instruction text for animating a front-view image."""
    try:
        description = ANIMATION_DESCRIPTIONS[AnimationType(animation)]
    except ValueError:
        description = ANIMATION_DESCRIPTIONS[AnimationType.TURN_360]

    return (
        f"Animate the person in this image to {description}. "
        f"It is crucial to maintain the person's appearance, the outfit they are wearing, "
        f"and the neutral light-gray studio background. "
        f"The video should be {int(duration)} seconds long with a {aspect_ratio} aspect ratio."
    )
