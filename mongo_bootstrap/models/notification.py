from datetime import UTC, datetime

from mongoengine import BooleanField, DateTimeField, StringField
from mongoengine_plus.aio import AsyncDocument
from mongoengine_plus.models import BaseModel, uuid_field


class Notification(BaseModel, AsyncDocument):
    """In-app notification, expired by a TTL index on ``created_at``"""

    meta = {
        "collection": "notifications",
        "auto_create_index": False,
    }

    id = StringField(primary_key=True, default=uuid_field("NOT_"))
    user_id = StringField(required=True)  # User.id
    message = StringField(required=True)
    is_read = BooleanField(default=False)
    created_at = DateTimeField(default=lambda: datetime.now(UTC))
