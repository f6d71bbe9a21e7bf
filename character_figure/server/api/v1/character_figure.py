"""
Character Figure Endpoints.

Generation, generation options, templates and per-user statistics under
``/api/character-figure``.
"""

from typing import Optional

from fastapi import APIRouter, Query

from character_figure.core.logging_config import get_logger
from character_figure.core.models.io import CharacterFigureRequest, TemplateGenerateRequest
from character_figure.server.responses import resp_data
from character_figure.server.services.character_figure import generate_character_figure, get_generation_config
from character_figure.server.services.deps import Context7Dep, CurrentUserDep, NanoBananaDep, SessionDep
from character_figure.server.services.history import get_user_stats
from character_figure.server.services.rate_limit import check_generation_rate_limit
from character_figure.server.services.subscriptions import (
    check_monthly_quota,
    get_user_tier,
    record_subscription_usage,
)
from character_figure.server.services.templates import generate_from_template, list_templates

logger = get_logger(__name__)

router = APIRouter(tags=["character-figure"])


@router.post(
    "/generate",
    summary="Generate Character Figure",
    description="Render a character from a description plus style, pose and appearance parameters. "
    "Costs 15 credits per image (25 in hd).",
    response_description="Generated images, the enhanced prompt and credit usage.",
    responses={
        400: {"description": "Invalid parameters"},
        401: {"description": "Not signed in"},
        402: {"description": "Insufficient credits"},
        403: {"description": "Monthly plan limit reached"},
        429: {"description": "Hourly generation limit reached"},
        502: {"description": "Image provider failed"},
    },
)
async def generate(
    body: CharacterFigureRequest,
    session: SessionDep,
    user: CurrentUserDep,
    nano_banana: NanoBananaDep,
    context7: Context7Dep,
):
    """
    Generate a character figure.

    The user's hourly limit depends on their subscription tier, and an active
    plan caps generations per month. Credits are charged only after the
    provider returned images.
    """
    await check_monthly_quota(session, user.uuid)
    tier = await get_user_tier(session, user.uuid)
    await check_generation_rate_limit(user.uuid, tier)
    logger.info(f"Generation request from {user.uuid}: style={body.style.value} images={body.num_images}")
    result = await generate_character_figure(session, user, body, nano_banana, context7)
    await record_subscription_usage(session, user.uuid)
    return resp_data(result)


@router.get(
    "/generate",
    summary="Get Generation Options",
    description="List the styles, poses, genders, ages, aspect ratios and prices accepted by the generate endpoint.",
    response_description="Generation configuration.",
)
async def generation_options():
    return resp_data(get_generation_config())


@router.get(
    "/templates",
    summary="List Templates",
    description="List active generation templates, highest sort order first.",
    response_description="Template list.",
)
async def templates(
    session: SessionDep,
    category: Optional[str] = Query(None, description="Only templates of this category."),
    featured_only: bool = Query(False, description="Only featured templates."),
):
    items = await list_templates(session, category, featured_only)
    return resp_data({"templates": items, "total": len(items)})


@router.post(
    "/templates/{template_id}/generate",
    summary="Generate From Template",
    description="Generate with a template's parameters; customizations override the template.",
    response_description="Same payload as the generate endpoint, plus template_id.",
    responses={404: {"description": "Template not found or inactive"}},
)
async def generate_with_template(
    template_id: str,
    body: TemplateGenerateRequest,
    session: SessionDep,
    user: CurrentUserDep,
    nano_banana: NanoBananaDep,
    context7: Context7Dep,
):
    await check_monthly_quota(session, user.uuid)
    tier = await get_user_tier(session, user.uuid)
    await check_generation_rate_limit(user.uuid, tier)
    result = await generate_from_template(session, user, template_id, body.customizations, nano_banana, context7)
    await record_subscription_usage(session, user.uuid)
    return resp_data(result)


@router.get(
    "/stats",
    summary="Get Generation Stats",
    description="Totals and favourite style and pose over the user's non-deleted generations.",
    response_description="Generation statistics.",
    responses={401: {"description": "Not signed in"}},
)
async def stats(session: SessionDep, user: CurrentUserDep):
    return resp_data(await get_user_stats(session, user.uuid))
