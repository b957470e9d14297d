"""Skill interface and the registry that maps skill ids to implementations."""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, ClassVar

from .config import MANIFEST_FOOTER, MANIFEST_HEADER, NO_SKILLS_MANIFEST
from .models import ArgumentValue, NeedsConfirmation, SkillContext, SkillResult

logger = logging.getLogger(__name__)


class Skill(ABC):
    """
    A named capability the language model can invoke.

    Subclasses set the class attributes and implement ``execute``. A skill
    signals failure by raising ``SkillError`` and asks the user first by
    returning ``NeedsConfirmation``.
    """

    id: ClassVar[str]
    name: ClassVar[str]
    description: ClassVar[str]
    argument_schema: ClassVar[dict[str, Any]] = {"type": "object", "properties": {}}
    # False for skills whose text is already a user-ready reply
    includes_in_response: ClassVar[bool] = True

    @abstractmethod
    async def execute(
        self, arguments: dict[str, ArgumentValue], context: SkillContext
    ) -> SkillResult | NeedsConfirmation:
        """
        Run the skill.

        Args:
            arguments: Decoded call arguments
            context: Speaker, source and request details

        Returns:
            A result, or a confirmation request when the action must be approved

        Raises:
            SkillError: If the arguments are invalid or execution fails
        """
        pass


class SkillRegistry:
    """Registered skills plus the set of ids currently enabled."""

    def __init__(
        self,
        skills: Iterable[Skill] = (),
        enabled_skill_ids: Iterable[str] | None = None,
    ) -> None:
        """
        Initialize the registry.

        Args:
            skills: Skills to register
            enabled_skill_ids: Ids to enable; None enables every registered skill
        """
        self._skills: dict[str, Skill] = {}
        self._disabled: set[str] = set()
        for skill in skills:
            self.register(skill)
        if enabled_skill_ids is not None:
            enabled = set(enabled_skill_ids)
            self._disabled = {skill_id for skill_id in self._skills if skill_id not in enabled}

    def register(self, skill: Skill) -> None:
        if skill.id in self._skills:
            logger.warning(f"Replacing registered skill '{skill.id}'")
        self._skills[skill.id] = skill
        logger.debug(f"Registered skill '{skill.id}'")

    def unregister(self, skill_id: str) -> bool:
        self._disabled.discard(skill_id)
        return self._skills.pop(skill_id, None) is not None

    def get(self, skill_id: str) -> Skill | None:
        return self._skills.get(skill_id)

    def is_enabled(self, skill_id: str) -> bool:
        return skill_id in self._skills and skill_id not in self._disabled

    def enable(self, skill_id: str) -> None:
        self._disabled.discard(skill_id)

    def disable(self, skill_id: str) -> None:
        if skill_id in self._skills:
            self._disabled.add(skill_id)

    @property
    def skills(self) -> list[Skill]:
        return list(self._skills.values())

    @property
    def enabled_skills(self) -> list[Skill]:
        return [s for s in self._skills.values() if s.id not in self._disabled]

    def generate_manifest(self) -> str:
        """
        Describe the enabled skills and the action-plan JSON format.

        Returns:
            Text appended to the language model's system prompt
        """
        enabled = self.enabled_skills
        if not enabled:
            return NO_SKILLS_MANIFEST

        sections = [MANIFEST_HEADER]
        for skill in enabled:
            sections.append(
                "---\n"
                f"ID: {skill.id}\n"
                f"Name: {skill.name}\n"
                f"Description: {skill.description}\n"
                f"Arguments schema:\n{json.dumps(skill.argument_schema, indent=2)}\n\n"
            )
        sections.append(MANIFEST_FOOTER)
        return "".join(sections)
