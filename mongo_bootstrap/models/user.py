from datetime import UTC, datetime

from mongoengine import BooleanField, DateTimeField, StringField
from mongoengine_plus.aio import AsyncDocument
from mongoengine_plus.models import BaseModel, uuid_field
from mongoengine_plus.models.event_handlers import updated_at


@updated_at.apply
class User(BaseModel, AsyncDocument):
    """Application user

    Users who never confirm their email are removed by the TTL index on
    ``expire_at``; confirmed users have it unset.
    """

    meta = {
        "collection": "users",
        "indexes": [
            {"fields": ["email"], "unique": True},
        ],
        "auto_create_index": False,
    }

    id = StringField(primary_key=True, default=uuid_field("USR_"))
    email = StringField(required=True, unique=True)
    full_name = StringField(required=True)
    language = StringField(default="en")
    verified = BooleanField(default=False)
    expire_at = DateTimeField()
    created_at = DateTimeField(default=lambda: datetime.now(UTC))
    updated_at = DateTimeField(default=lambda: datetime.now(UTC))
