"""
Character figure generation.

A generation turns a user's description plus structured parameters (style,
pose, gender, age, clothing, ...) into a style-specific prompt, renders it
with Nano Banana, charges credits per image and records the result in the
history. Optionally the first image is published to the gallery.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.database.entities.character_generations import CharacterGeneration
from character_figure.core.database.entities.users import User
from character_figure.core.database.repositories import CharacterGenerationRepository
from character_figure.core.errors import GenerationError, InsufficientCreditsError
from character_figure.core.logging_config import get_logger
from character_figure.core.models.domain import (
    CharacterAge,
    CharacterGender,
    CharacterPose,
    CharacterStyle,
    CreditsTransType,
    ImageQuality,
)
from character_figure.core.models.io import SUPPORTED_ASPECT_RATIOS, CharacterFigureRequest
from character_figure.core.monitoring import log_generation
from character_figure.core.utils import get_uuid
from character_figure.providers import Context7Service, NanoBananaService, ProviderError

from .credits import deduct_credits, get_user_credits
from .gallery import create_gallery_item
from .preferences import update_preference_stats

logger = get_logger(__name__)

STANDARD_CREDITS_PER_IMAGE = 15
HD_CREDITS_PER_IMAGE = 25
MAX_IMAGES_PER_REQUEST = 4


@dataclass(frozen=True)
class StylePromptConfig:
    prefix: str
    suffix: str
    negative_prompt: str
    recommended_settings: Dict[str, str] = field(default_factory=dict)
    description: str = ""


STYLE_PROMPT_CONFIGS: Dict[CharacterStyle, StylePromptConfig] = {
    CharacterStyle.anime: StylePromptConfig(
        prefix="anime style, high quality anime art, detailed anime character,",
        suffix=", anime art style, vibrant colors, clean lines, detailed shading",
        negative_prompt="realistic, photorealistic, 3d render, blurry, low quality",
        recommended_settings={"quality": "hd", "aspect_ratio": "1:1"},
        description="High-quality anime art style with vibrant colors and clean lines",
    ),
    CharacterStyle.realistic: StylePromptConfig(
        prefix="photorealistic, highly detailed, professional photography,",
        suffix=", realistic lighting, detailed textures, high resolution, sharp focus",
        negative_prompt="anime, cartoon, drawing, sketch, low quality, blurry",
        recommended_settings={"quality": "hd", "aspect_ratio": "4:3"},
        description="Photorealistic characters with detailed textures and lighting",
    ),
    CharacterStyle.cartoon: StylePromptConfig(
        prefix="cartoon style, stylized character design, colorful cartoon art,",
        suffix=", bright colors, cartoon illustration, clean art style",
        negative_prompt="realistic, photorealistic, dark, gritty, low quality",
        recommended_settings={"quality": "standard", "aspect_ratio": "1:1"},
        description="Stylized cartoon characters with bright, playful aesthetics",
    ),
    CharacterStyle.fantasy: StylePromptConfig(
        prefix="fantasy art style, magical character, fantasy illustration,",
        suffix=", mystical atmosphere, detailed fantasy art, enchanted setting",
        negative_prompt="modern, contemporary, realistic photo, low quality",
        recommended_settings={"quality": "hd", "aspect_ratio": "3:4"},
        description="Magical fantasy characters in enchanted settings",
    ),
    CharacterStyle.cyberpunk: StylePromptConfig(
        prefix="cyberpunk style, futuristic character, neon-lit, high-tech,",
        suffix=", cyberpunk aesthetic, neon colors, futuristic city, detailed sci-fi art",
        negative_prompt="medieval, fantasy, natural, low quality, blurry",
        recommended_settings={"quality": "hd", "aspect_ratio": "16:9"},
        description="Futuristic characters with neon-lit, high-tech aesthetics",
    ),
    CharacterStyle.steampunk: StylePromptConfig(
        prefix="steampunk style, Victorian-era technology, brass and copper details,",
        suffix=", steampunk aesthetic, mechanical details, vintage technology, detailed art",
        negative_prompt="modern, futuristic, digital, low quality",
        recommended_settings={"quality": "hd", "aspect_ratio": "4:3"},
        description="Victorian-era characters with brass and copper mechanical details",
    ),
    CharacterStyle.medieval: StylePromptConfig(
        prefix="medieval style, historical character, medieval period,",
        suffix=", medieval aesthetic, historical accuracy, detailed period art",
        negative_prompt="modern, futuristic, contemporary, low quality",
        recommended_settings={"quality": "standard", "aspect_ratio": "3:4"},
        description="Historical medieval characters with period-accurate details",
    ),
    CharacterStyle.modern: StylePromptConfig(
        prefix="modern style, contemporary character, current fashion,",
        suffix=", modern aesthetic, contemporary art style, clean design",
        negative_prompt="historical, medieval, fantasy, low quality",
        recommended_settings={"quality": "standard", "aspect_ratio": "1:1"},
        description="Contemporary characters with current fashion and styling",
    ),
    CharacterStyle.sci_fi: StylePromptConfig(
        prefix="sci-fi style, science fiction character, futuristic design,",
        suffix=", sci-fi aesthetic, advanced technology, space age, detailed sci-fi art",
        negative_prompt="medieval, historical, fantasy magic, low quality",
        recommended_settings={"quality": "hd", "aspect_ratio": "16:9"},
        description="Science fiction characters with advanced technology themes",
    ),
    CharacterStyle.chibi: StylePromptConfig(
        prefix="chibi style, cute chibi character, super deformed style,",
        suffix=", chibi art style, adorable, simplified features, kawaii",
        negative_prompt="realistic, detailed anatomy, complex, low quality",
        recommended_settings={"quality": "standard", "aspect_ratio": "1:1"},
        description="Cute, super-deformed characters with simplified, adorable features",
    ),
}

POSE_DESCRIPTIONS: Dict[CharacterPose, str] = {
    CharacterPose.standing: "Character in a natural standing position",
    CharacterPose.sitting: "Character in a comfortable sitting pose",
    CharacterPose.action: "Dynamic action pose showing movement",
    CharacterPose.portrait: "Close-up portrait focusing on face and upper body",
    CharacterPose.full_body: "Full body view showing the complete character",
    CharacterPose.dynamic: "Energetic pose with dramatic angles",
    CharacterPose.fighting: "Combat-ready pose showing strength and power",
    CharacterPose.dancing: "Graceful dancing pose in mid-movement",
    CharacterPose.flying: "Airborne pose as if flying or jumping",
    CharacterPose.custom: "Custom pose based on your specific description",
}


def _display_name(value: str) -> str:
    return value[:1].upper() + value[1:].replace("_", " ", 1)


def build_enhanced_prompt(req: CharacterFigureRequest) -> str:
    """Wrap the user's description with the style prefix/suffix and structured details."""
    config = STYLE_PROMPT_CONFIGS[CharacterStyle(req.style)]
    prompt = f"{config.prefix} {req.prompt.strip()}"
    if req.pose != CharacterPose.custom:
        prompt += f", {req.pose.value} pose"
    if req.gender != CharacterGender.any:
        prompt += f", {req.gender.value}"
    if req.age != CharacterAge.any:
        prompt += f", {req.age.value.replace('_', ' ', 1)}"
    if req.clothing:
        prompt += f", wearing {req.clothing}"
    if req.background:
        prompt += f", {req.background} background"
    if req.color_palette:
        prompt += f", {req.color_palette} color scheme"
    if req.style_keywords:
        prompt += f", {', '.join(req.style_keywords)}"
    return prompt + config.suffix


def calculate_credits(quality, num_images: int) -> int:
    per_image = HD_CREDITS_PER_IMAGE if ImageQuality(quality) == ImageQuality.hd else STANDARD_CREDITS_PER_IMAGE
    return per_image * num_images


def get_generation_config() -> Dict[str, Any]:
    """Options offered to clients building a generation request."""
    return {
        "available_styles": [
            {
                "id": style.value,
                "name": _display_name(style.value),
                "description": config.description,
                "recommended_settings": config.recommended_settings,
            }
            for style, config in STYLE_PROMPT_CONFIGS.items()
        ],
        "available_poses": [
            {"id": pose.value, "name": _display_name(pose.value), "description": POSE_DESCRIPTIONS[pose]}
            for pose in CharacterPose
        ],
        "available_genders": [{"id": g.value, "name": _display_name(g.value)} for g in CharacterGender],
        "available_ages": [{"id": a.value, "name": _display_name(a.value)} for a in CharacterAge],
        "credits_per_image": {"standard": STANDARD_CREDITS_PER_IMAGE, "hd": HD_CREDITS_PER_IMAGE},
        "max_images_per_request": MAX_IMAGES_PER_REQUEST,
        "supported_aspect_ratios": list(SUPPORTED_ASPECT_RATIOS),
        "quality_options": [q.value for q in ImageQuality],
    }


def _decorate_images(images: List[Dict[str, Any]], req: CharacterFigureRequest, enhanced_prompt: str) -> List[dict]:
    return [
        {
            **image,
            "id": get_uuid(),
            "enhanced_prompt": enhanced_prompt,
            "style": req.style.value,
            "pose": req.pose.value,
            "character_info": {
                "gender": req.gender.value,
                "age": req.age.value,
                "clothing": req.clothing,
                "background": req.background,
                "color_palette": req.color_palette,
            },
            "generation_params": {
                "seed": req.seed,
                "quality": req.quality.value,
                "aspect_ratio": req.aspect_ratio,
            },
        }
        for image in images
    ]


async def generate_character_figure(
    session: AsyncSession,
    user: User,
    req: CharacterFigureRequest,
    nano_banana: NanoBananaService,
    context7: Optional[Context7Service] = None,
) -> Dict[str, Any]:
    """Run one generation end to end.

    Raises:
        InsufficientCreditsError: If the balance does not cover the request
        GenerationError: If the image provider returns no result
    """
    credits_required = calculate_credits(req.quality, req.num_images)
    balance = await get_user_credits(session, user.uuid)
    if balance.left_credits < credits_required:
        raise InsufficientCreditsError(
            f"Insufficient credits. You need {credits_required} credits but only have "
            f"{balance.left_credits}. Please purchase more credits.",
            required=credits_required,
            available=balance.left_credits,
        )

    enhanced_prompt = build_enhanced_prompt(req)
    started = time.perf_counter()
    result = await nano_banana.generate_image(
        enhanced_prompt,
        num_images=req.num_images,
        aspect_ratio=req.aspect_ratio,
        quality=req.quality.value,
        seed=req.seed,
    )
    generation_time = int((time.perf_counter() - started) * 1000)

    if not result.success:
        log_generation("image", user.uuid, 0, generation_time, False)
        raise GenerationError(result.error or "Image generation failed")

    if not await deduct_credits(session, user.uuid, credits_required, CreditsTransType.image_generation):
        logger.warning(f"Failed to deduct {credits_required} credits after generation for user {user.uuid}")

    images = _decorate_images(result.images, req, enhanced_prompt)
    repo = CharacterGenerationRepository(session)
    generation = await repo.create(
        CharacterGeneration(
            uuid=get_uuid(),
            user_uuid=user.uuid,
            original_prompt=req.prompt,
            enhanced_prompt=enhanced_prompt,
            style=req.style.value,
            pose=req.pose.value,
            gender=req.gender.value,
            age=req.age.value,
            style_keywords=req.style_keywords,
            clothing=req.clothing,
            background=req.background,
            color_palette=req.color_palette,
            aspect_ratio=req.aspect_ratio,
            quality=req.quality.value,
            num_images=req.num_images,
            seed=req.seed,
            generated_images=images,
            generation_time=generation_time,
            credits_used=credits_required,
            nano_banana_request_id=result.request_id,
            nano_banana_response=result.to_dict(),
            generation_params={
                "original_request": req.model_dump(mode="json"),
                "enhanced_prompt": enhanced_prompt,
                "credits_used": credits_required,
            },
        )
    )

    if req.save_to_gallery and images:
        item = await create_gallery_item(
            session,
            user,
            generation,
            title=f"{_display_name(req.style.value)} Character",
            description=(
                f"A {req.style.value} style character in {req.pose.value} pose. "
                f'Generated with: "{req.prompt[:100]}..."'
            ),
            is_public=req.make_public,
        )
        generation.gallery_item_id = item.id
        generation = await repo.update(generation)

    await update_preference_stats(session, user.uuid, req.style.value, req.pose.value)

    if context7 is not None:
        try:
            await context7.store_session_history(
                user.uuid,
                req.prompt,
                enhanced_prompt,
                {"model": "nano-banana", "provider": "nano-banana", "style": req.style.value},
            )
        except ProviderError as e:
            logger.warning(f"Could not store generation context for user {user.uuid}: {e.message}")

    log_generation("image", user.uuid, credits_required, generation_time, True)
    logger.info(f"Generated {len(images)} image(s) for user {user.uuid} in {generation_time}ms")
    return {
        "generation_id": generation.uuid,
        "images": images,
        "enhanced_prompt": enhanced_prompt,
        "style_applied": req.style.value,
        "credits_used": credits_required,
        "credits_remaining": balance.left_credits - credits_required,
        "generation_time": generation_time,
        "request_id": result.request_id,
        "gallery_item_id": generation.gallery_item_id,
    }
