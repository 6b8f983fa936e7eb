import json
import logging
from typing import List, Optional

from openai import AsyncOpenAI, OpenAIError

from app.core.config import get_settings
from app.core.exceptions import ProviderError, ProviderNotConfiguredError
from app.utils.prompt_manager import prompt_manager


logger = logging.getLogger(__name__)

_decoder = json.JSONDecoder()


def _first_json_array(content: str) -> Optional[list]:
    # Ищем первый '[', с которого декодируется JSON-массив; текст после него игнорируется
    start = content.find("[")
    while start != -1:
        try:
            parsed, _ = _decoder.raw_decode(content, start)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return parsed
        start = content.find("[", start + 1)
    return None


def parse_subtasks(content: str) -> List[str]:
    """
    Разбирает ответ модели в список подзадач.
    Сначала пробуем весь ответ как JSON, затем первый JSON-массив внутри текста.
    """
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        parsed = _first_json_array(content)

    if not isinstance(parsed, list):
        raise ProviderError("Failed to parse subtasks from response")

    return [str(item).strip() for item in parsed if str(item).strip()]


class OpenAIService:
    """
    Обертка над OpenAI: эмбеддинги заголовков и генерация подзадач.
    Повторы запросов отключены (max_retries=0): пользователь сам повторяет действие.
    """

    def __init__(self, gpt_model: str = None):
        settings = get_settings()
        if not settings.openai_api_key:
            raise ProviderNotConfiguredError()

        client_kwargs = {"api_key": settings.openai_api_key, "max_retries": 0}
        if settings.openai_base_url:
            client_kwargs["base_url"] = settings.openai_base_url

        self.client = AsyncOpenAI(**client_kwargs)
        self.model = gpt_model or settings.gpt_model_fast
        self.embedding_model = settings.embedding_model
        self.embedding_dimensions = settings.embedding_dimensions

    async def embed(self, text: str) -> List[float]:
        """Возвращает эмбеддинг текста фиксированной длины"""
        try:
            response = await self.client.embeddings.create(
                model=self.embedding_model, input=text, dimensions=self.embedding_dimensions
            )
        except OpenAIError as e:
            logger.error(f"OpenAI embeddings error: {e}")
            raise ProviderError(f"OpenAI API error: {e}") from e

        data = getattr(response, "data", None) or []
        embedding: Optional[List[float]] = data[0].embedding if data else None
        if not embedding:
            raise ProviderError("No embedding received from OpenAI")
        return list(embedding)

    async def generate_subtasks(self, task_title: str) -> List[str]:
        """Просит модель разбить задачу на 5-7 коротких подзадач"""
        system_prompt = prompt_manager.render("subtask_generator", task_title=task_title)

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": task_title},
                ],
                temperature=1,
                max_tokens=2048,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI completion error: {e}")
            raise ProviderError(f"OpenAI API error: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ProviderError("No content received from OpenAI")

        return parse_subtasks(content)


def get_openai_service() -> OpenAIService:
    """Создает сервис; без OPENAI_API_KEY падает до любых внешних вызовов"""
    return OpenAIService()
