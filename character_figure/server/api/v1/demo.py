"""
Demo Endpoints.

Text and image generation through OpenRouter and SiliconFlow. Without an API
key the endpoints answer with canned demo payloads. Signed-in callers pay
``CREDITS_PER_IMAGE`` per generated image.
"""

from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter

from character_figure.core.errors import ApiError, InsufficientCreditsError
from character_figure.core.logging_config import get_logger
from character_figure.core.models.domain import CreditsTransType
from character_figure.core.models.io import GenImageRequest, GenTextRequest
from character_figure.core.utils import get_uuid
from character_figure.providers import ProviderError
from character_figure.server.responses import resp_data
from character_figure.server.services.credits import deduct_credits, get_user_credits
from character_figure.server.services.deps import OpenRouterDep, OptionalUserDep, SessionDep, SiliconFlowDep

logger = get_logger(__name__)

router = APIRouter(tags=["demo"])

CREDITS_PER_IMAGE = 5
TEXT_PROVIDERS = ("openrouter", "siliconflow")
DEMO_PLACEHOLDER_URL = "/api/placeholder/1024/1024"


def _demo_text(provider: str, model: str, prompt: str) -> Dict[str, Optional[str]]:
    if provider == "openrouter":
        return {
            "text": f'[OpenRouter {model} Demo]\n\nProcessing prompt: "{prompt}"\n\n'
            "OpenRouter provides access to multiple AI models through a unified API.",
            "reasoning": "DeepSeek R1 via OpenRouter would display reasoning here." if "r1" in model else None,
        }
    return {
        "text": f'[SiliconFlow {model} Demo]\n\nInput: "{prompt}"\n\n'
        "SiliconFlow enables fast and efficient AI model inference.",
        "reasoning": "Advanced reasoning capabilities would be shown here for R1 models." if "R1" in model else None,
    }


@router.post(
    "/gen-text",
    summary="Generate Text",
    description="Single-turn text generation through OpenRouter or SiliconFlow.",
    response_description="Generated text and, for reasoning models, the reasoning.",
    responses={400: {"description": "Invalid provider or provider failure"}},
)
async def gen_text(body: GenTextRequest, openrouter: OpenRouterDep, siliconflow: SiliconFlowDep):
    if body.provider not in TEXT_PROVIDERS:
        raise ApiError("invalid provider")
    client = openrouter if body.provider == "openrouter" else siliconflow
    if not client.api_key:
        return resp_data(_demo_text(body.provider, body.model, body.prompt))
    try:
        result = await client.generate_text(body.model, body.prompt)
    except ProviderError as e:
        logger.error(f"gen-text via {body.provider} failed: {e.message}")
        raise ApiError(f"text generation failed: {e.message}") from e
    return resp_data(result)


async def _generate_images(
    session,
    user,
    body: GenImageRequest,
    provider: str,
    api_key: Optional[str],
    call: Callable[[], Any],
) -> Dict[str, Any]:
    if not api_key:
        return {
            "images": [
                {
                    "url": DEMO_PLACEHOLDER_URL,
                    "provider": provider,
                    "model": body.model,
                    "prompt": body.prompt,
                    "demo": True,
                }
            ],
            "message": "Demo mode - API key not configured",
        }

    required = CREDITS_PER_IMAGE * body.n
    if user is not None:
        balance = await get_user_credits(session, user.uuid)
        if balance.left_credits < required:
            raise InsufficientCreditsError(
                f"Insufficient credits. You have {balance.left_credits} credits, but need {required}. Please recharge.",
                required=required,
                available=balance.left_credits,
                status_code=400,
            )

    try:
        generated: List[Dict[str, Any]] = await call()
    except ProviderError as e:
        logger.error(f"{provider} image generation failed: {e.message}")
        raise ApiError(f"{provider} image generation failed: {e.message}") from e
    if not generated:
        raise ApiError("No images were generated")

    images = [
        {**image, "provider": provider, "model": body.model, "filename": f"{provider}_{get_uuid()}.png"}
        for image in generated
    ]
    payload: Dict[str, Any] = {"images": images}
    if user is not None:
        credits_used = CREDITS_PER_IMAGE * len(images)
        if await deduct_credits(session, user.uuid, credits_used, CreditsTransType.image_generation):
            payload["credits_used"] = credits_used
            payload["credits_remaining"] = (await get_user_credits(session, user.uuid)).left_credits
        else:
            logger.error(f"Failed to deduct {credits_used} credits for {provider} images of {user.uuid}")
    return payload


@router.post(
    "/gen-image-siliconflow",
    summary="Generate Image (SiliconFlow)",
    description="Generate images with SiliconFlow FLUX or Stable Diffusion models.",
    response_description="Generated image URLs.",
)
async def gen_image_siliconflow(
    body: GenImageRequest, session: SessionDep, user: OptionalUserDep, siliconflow: SiliconFlowDep
):
    async def call():
        return await siliconflow.generate_images(body.model, body.prompt, size=body.size, n=body.n)

    return resp_data(await _generate_images(session, user, body, "siliconflow", siliconflow.api_key, call))


@router.post(
    "/gen-image-openrouter",
    summary="Generate Image (OpenRouter)",
    description="Generate images with OpenRouter image models.",
    response_description="Generated image URLs.",
)
async def gen_image_openrouter(
    body: GenImageRequest, session: SessionDep, user: OptionalUserDep, openrouter: OpenRouterDep
):
    async def call():
        return await openrouter.generate_image(
            body.model, body.prompt, size=body.size, quality=body.quality, style=body.style, n=body.n
        )

    return resp_data(await _generate_images(session, user, body, "openrouter", openrouter.api_key, call))
