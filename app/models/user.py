from tortoise import fields, models
import uuid

class User(models.Model):
    """Пользователь и его профиль; картинка профиля хранится только как URL"""
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    email = fields.CharField(max_length=255, unique=True, null=True)
    full_name = fields.CharField(max_length=200, null=True)
    avatar_url = fields.CharField(max_length=500, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    tasks: fields.ReverseRelation["Task"]
    subtasks: fields.ReverseRelation["Subtask"]

    class Meta:
        table = "users"
