from datetime import UTC, datetime

from mongoengine import DateTimeField, StringField
from mongoengine_plus.aio import AsyncDocument
from mongoengine_plus.models import BaseModel, uuid_field


class Token(BaseModel, AsyncDocument):
    """Single-use email validation or password reset token"""

    meta = {
        "collection": "tokens",
        "indexes": [
            {"fields": ["token"], "unique": True},
            "user_id",
        ],
        "auto_create_index": False,
    }

    id = StringField(primary_key=True, default=uuid_field("TOK_"))
    user_id = StringField(required=True)  # User.id
    token = StringField(required=True, unique=True)
    expire_at = DateTimeField(default=lambda: datetime.now(UTC))
