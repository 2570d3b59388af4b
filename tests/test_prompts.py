"""
Tests for services/prompts.py
"""

import pytest

from fitting_room.schemas.tryon import VIEW_ORDER, QualityTier, ViewLabel
from fitting_room.schemas.video import AnimationType, VideoDuration
from fitting_room.services.prompts import (
    ANIMATION_DESCRIPTIONS,
    CONSISTENCY_MANDATE,
    ERROR_SENTINEL,
    FIDELITY_MANDATE,
    FULL_BODY_ADVISORY,
    STYLE_REFERENCE_CLAUSE,
    build_video_prompt,
    build_view_prompt,
)


def _prompt(view=ViewLabel.FRONT, quality=QualityTier.STANDARD, style=False, instructions="", seed=7):
    return build_view_prompt(view, quality, style, instructions, seed)


class TestQualityPreamble:
    """Wording scales with the tier"""

    def test_standard(self):
        prompt = _prompt(quality=QualityTier.STANDARD)
        assert "high-quality" in prompt
        assert "4K" not in prompt

    def test_high(self):
        prompt = _prompt(quality=QualityTier.HIGH)
        assert "high-resolution" in prompt
        assert "indistinguishable from a real photograph" in prompt

    def test_ultra(self):
        prompt = _prompt(quality=QualityTier.ULTRA)
        assert "ultra-high-resolution" in prompt
        assert "4K" in prompt
        assert "indistinguishable from professional photography" in prompt


class TestViewDirective:
    """Exactly one view is named"""

    @pytest.mark.parametrize("view", VIEW_ORDER)
    def test_names_only_its_view(self, view):
        prompt = _prompt(view=view)
        assert f"**{view.value}**" in prompt
        for other in VIEW_ORDER:
            if other != view:
                assert f"**{other.value}**" not in prompt


class TestOptionalClauses:
    """Style reference and user instructions"""

    def test_style_clause_only_with_style(self):
        assert STYLE_REFERENCE_CLAUSE in _prompt(style=True)
        assert STYLE_REFERENCE_CLAUSE not in _prompt(style=False)

    def test_instructions_trimmed_and_verbatim(self):
        prompt = _prompt(instructions="   roll up the sleeves  \n")
        assert "roll up the sleeves" in prompt
        assert "   roll up" not in prompt

    def test_blank_instructions_omitted(self):
        assert "Additional instructions" not in _prompt(instructions="   ")
        assert "Additional instructions" not in build_view_prompt(
            ViewLabel.BACK, QualityTier.HIGH, False, None, 1
        )


class TestFixedMandates:
    """Fidelity, consistency and error signalling are always present"""

    def test_fixed_clauses_present(self):
        prompt = _prompt()
        assert FIDELITY_MANDATE in prompt
        assert CONSISTENCY_MANDATE in prompt
        assert f'"{ERROR_SENTINEL} ' in prompt
        assert FULL_BODY_ADVISORY in prompt

    def test_views_of_one_combination_differ_only_in_view_clause(self):
        prompts = {
            view: _prompt(view=view, quality=QualityTier.HIGH, style=True, instructions="tuck in", seed=99)
            for view in VIEW_ORDER
        }

        for view, prompt in prompts.items():
            assert CONSISTENCY_MANDATE in prompt
            normalized = prompt.replace(f"**{view.value}**", "**<view>**")
            assert normalized == prompts[ViewLabel.FRONT].replace(
                f"**{ViewLabel.FRONT.value}**", "**<view>**"
            )

    def test_seed_is_echoed(self):
        assert "seed 12345" in _prompt(seed=12345)


class TestVideoPrompt:
    """Animation mapping, duration and aspect ratio"""

    @pytest.mark.parametrize("animation", list(AnimationType))
    def test_animation_descriptions(self, animation):
        prompt = build_video_prompt(animation, VideoDuration.MEDIUM, "9:16")
        assert ANIMATION_DESCRIPTIONS[animation] in prompt
        assert "8 seconds" in prompt
        assert "9:16" in prompt

    @pytest.mark.parametrize("animation", [None, "Moonwalk"])
    def test_unknown_animation_falls_back_to_turn(self, animation):
        prompt = build_video_prompt(animation, 5, "9:16")
        assert ANIMATION_DESCRIPTIONS[AnimationType.TURN_360] in prompt
