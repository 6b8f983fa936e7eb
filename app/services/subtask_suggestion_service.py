import logging
from typing import List, Optional, Tuple

from app.core.exceptions import SmartTasksError
from app.services.openai_tools import OpenAIService

logger = logging.getLogger(__name__)


class SubtaskSuggestionService:
    def __init__(self, ai: OpenAIService):
        self.ai = ai

    async def generate(self, task_title: str) -> List[str]:
        return await self.ai.generate_subtasks(task_title)

    async def suggest_or_empty(self, task_title: str) -> Tuple[List[str], Optional[str]]:
        # Для клиента: при ошибке просто нет подсказок
        try:
            return await self.generate(task_title), None
        except SmartTasksError as e:
            logger.error(f"Не удалось сгенерировать подзадачи для '{task_title}': {e.message}")
            return [], e.message
