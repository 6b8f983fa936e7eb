from tortoise import Tortoise
from app.core.config import get_settings

MODEL_MODULES = [
    "app.models.user",
    "app.models.task",
]


def get_tortoise_config(db_url: str | None = None) -> dict:
    """Конфигурация Tortoise ORM; db_url переопределяет URL из настроек (тесты, скрипты)"""
    return {
        "connections": {"default": db_url or get_settings().db_url},
        "apps": {
            "models": {
                "models": [*MODEL_MODULES, "aerich.models"],
                "default_connection": "default",
            }
        },
    }


# Используется aerich (см. [tool.aerich] в pyproject.toml)
TORTOISE_ORM = get_tortoise_config()


async def init_db(db_url: str | None = None) -> None:
    await Tortoise.init(config=get_tortoise_config(db_url))
    # Generate schemas only in dev (migrations handle prod)
    if get_settings().db_generate_schemas:
        await Tortoise.generate_schemas()


async def close_db() -> None:
    await Tortoise.close_connections()
