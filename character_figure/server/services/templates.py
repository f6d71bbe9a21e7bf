"""
Generation templates: curated parameter presets.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.database.entities.templates import CharacterTemplate
from character_figure.core.database.entities.users import User
from character_figure.core.database.repositories import CharacterTemplateRepository
from character_figure.core.errors import ApiError, NotFoundError
from character_figure.core.logging_config import get_logger
from character_figure.core.models.io import CharacterFigureRequest
from character_figure.providers import Context7Service, NanoBananaService

from .character_figure import generate_character_figure

logger = get_logger(__name__)


def template_to_dict(template: CharacterTemplate) -> Dict[str, Any]:
    return template.model_dump(exclude={"id"})


async def list_templates(
    session: AsyncSession, category: Optional[str] = None, featured_only: bool = False
) -> List[Dict[str, Any]]:
    templates = await CharacterTemplateRepository(session).list_active(category, featured_only)
    return [template_to_dict(t) for t in templates]


def build_template_request(template: CharacterTemplate, customizations: Dict[str, Any]) -> CharacterFigureRequest:
    """Merge the preset with the caller's overrides; overrides win.

    Raises:
        ApiError: If the merged parameters are not a valid generation request
    """
    params = {**(template.template_params or {}), **(customizations or {})}
    try:
        return CharacterFigureRequest.model_validate(params)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(p) for p in first.get("loc", ()))
        raise ApiError(f"Invalid template parameters: {location} {first.get('msg', '')}".strip())


async def generate_from_template(
    session: AsyncSession,
    user: User,
    template_uuid: str,
    customizations: Dict[str, Any],
    nano_banana: NanoBananaService,
    context7: Optional[Context7Service] = None,
) -> Dict[str, Any]:
    repo = CharacterTemplateRepository(session)
    template = await repo.get_by_uuid(template_uuid)
    if template is None or not template.is_active:
        raise NotFoundError("Template not found")

    req = build_template_request(template, customizations)
    await repo.increment_usage(template)
    logger.info(f"User {user.uuid} generating from template {template.name}")
    result = await generate_character_figure(session, user, req, nano_banana, context7)
    return {**result, "template_id": template.uuid}
