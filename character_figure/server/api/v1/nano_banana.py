"""
Nano Banana Endpoints.

Direct access to the Nano Banana image API for signed-in users, charged
against the credits ledger after a successful call.
"""

import time

from fastapi import APIRouter

from character_figure.core.errors import ApiError, InsufficientCreditsError
from character_figure.core.logging_config import get_logger
from character_figure.core.models.domain import CreditsTransType
from character_figure.core.models.io import NanoBananaEditRequest, NanoBananaGenerateRequest
from character_figure.providers import NanoBananaResult
from character_figure.server.responses import resp_data
from character_figure.server.services.credits import UserCredits, deduct_credits, get_user_credits
from character_figure.server.services.deps import CurrentUserDep, NanoBananaDep, SessionDep

logger = get_logger(__name__)

router = APIRouter(tags=["nano-banana"])

CREDITS_PER_IMAGE = 10
CREDITS_PER_EDIT = 10
MAX_IMAGES_PER_REQUEST = 4
AVAILABLE_STYLES = ["realistic", "anime", "cartoon", "watercolor", "oil_painting", "sketch", "pixel_art"]
AVAILABLE_ASPECT_RATIOS = ["1:1", "16:9", "9:16", "4:3", "3:4"]

_PROVIDER_ERRORS = {
    "TIMEOUT": "Request timeout - The image generation took too long. Please try again.",
}
_PROVIDER_STATUS_ERRORS = {
    429: "Rate limit exceeded - Please wait a moment before trying again.",
    402: "Payment required - Your nano-banana credits may be exhausted.",
}


async def _require_credits(session, user_uuid: str, required: int) -> UserCredits:
    balance = await get_user_credits(session, user_uuid)
    if balance.left_credits < required:
        raise InsufficientCreditsError(
            f"Insufficient credits. You need {required} credits but only have "
            f"{balance.left_credits}. Please purchase more credits.",
            required=required,
            available=balance.left_credits,
            status_code=400,
        )
    return balance


def _raise_for_result(result: NanoBananaResult) -> None:
    if result.success:
        return
    message = _PROVIDER_ERRORS.get(result.error_code or "") or _PROVIDER_STATUS_ERRORS.get(result.status_code or 0)
    raise ApiError(message or result.error or "Image generation failed. Please try again.")


@router.post(
    "/generate",
    summary="Generate Images",
    description=f"Generate up to {MAX_IMAGES_PER_REQUEST} images from a prompt. Costs {CREDITS_PER_IMAGE} credits per image.",
    response_description="Generated images and credit usage.",
    responses={400: {"description": "Invalid request, insufficient credits or provider failure"}},
)
async def generate(body: NanoBananaGenerateRequest, session: SessionDep, user: CurrentUserDep, service: NanoBananaDep):
    if not 1 <= body.num_images <= MAX_IMAGES_PER_REQUEST:
        raise ApiError(f"Number of images must be between 1 and {MAX_IMAGES_PER_REQUEST}")
    required = body.num_images * CREDITS_PER_IMAGE
    balance = await _require_credits(session, user.uuid, required)

    started = time.perf_counter()
    result = await service.generate_image(
        body.prompt,
        num_images=body.num_images,
        aspect_ratio=body.aspect_ratio,
        style=body.style,
        quality=body.quality,
        seed=body.seed,
    )
    _raise_for_result(result)

    if not await deduct_credits(session, user.uuid, required, CreditsTransType.image_generation):
        logger.error(f"Failed to deduct {required} credits after nano-banana generation for {user.uuid}")
    processing_time = int((time.perf_counter() - started) * 1000)
    return resp_data(
        {
            "success": True,
            "images": result.images,
            "credits_used": required,
            "credits_remaining": balance.left_credits - required,
            "processing_time": processing_time,
            "request_id": result.request_id,
        }
    )


@router.get(
    "/generate",
    summary="Get Generation Configuration",
    description="Return the caller's credits, prices, limits and service usage statistics.",
    response_description="Generation configuration.",
)
async def generation_config(session: SessionDep, user: CurrentUserDep, service: NanoBananaDep):
    balance = await get_user_credits(session, user.uuid)
    return resp_data(
        {
            "user_credits": balance.left_credits,
            "credits_per_image": CREDITS_PER_IMAGE,
            "max_images_per_request": MAX_IMAGES_PER_REQUEST,
            "service_stats": service.get_usage_stats(),
            "available_styles": AVAILABLE_STYLES,
            "available_aspect_ratios": AVAILABLE_ASPECT_RATIOS,
        }
    )


@router.post(
    "/edit",
    summary="Edit Images",
    description=f"Edit up to 5 input images with a prompt. Costs {CREDITS_PER_EDIT} credits per request.",
    response_description="Edited images and credit usage.",
    responses={400: {"description": "Invalid request, insufficient credits or provider failure"}},
)
async def edit(body: NanoBananaEditRequest, session: SessionDep, user: CurrentUserDep, service: NanoBananaDep):
    if not 1 <= body.num_images <= MAX_IMAGES_PER_REQUEST:
        raise ApiError(f"Number of output images must be between 1 and {MAX_IMAGES_PER_REQUEST}")
    balance = await _require_credits(session, user.uuid, CREDITS_PER_EDIT)

    started = time.perf_counter()
    result = await service.edit_image(
        body.prompt,
        body.image_urls,
        num_images=body.num_images,
        edit_type=body.edit_type,
        mask_url=body.mask_url,
    )
    _raise_for_result(result)

    if not await deduct_credits(session, user.uuid, CREDITS_PER_EDIT, CreditsTransType.image_generation):
        logger.error(f"Failed to deduct {CREDITS_PER_EDIT} credits after nano-banana edit for {user.uuid}")
    return resp_data(
        {
            "success": True,
            "images": result.images,
            "credits_used": CREDITS_PER_EDIT,
            "credits_remaining": balance.left_credits - CREDITS_PER_EDIT,
            "processing_time": int((time.perf_counter() - started) * 1000),
            "request_id": result.request_id,
            "input_images": len(body.image_urls),
        }
    )
