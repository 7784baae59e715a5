from datetime import UTC, datetime

from mongoengine import DateTimeField, ListField, StringField
from mongoengine_plus.aio import AsyncDocument
from mongoengine_plus.models import BaseModel, uuid_field
from mongoengine_plus.models.event_handlers import updated_at


@updated_at.apply
class Category(BaseModel, AsyncDocument):
    """Category labelled by one Value per supported language"""

    meta = {
        "collection": "categories",
        "indexes": ["values"],
        "auto_create_index": False,
    }

    id = StringField(primary_key=True, default=uuid_field("CAT_"))
    values = ListField(StringField(), default=list)  # Value.id
    created_at = DateTimeField(default=lambda: datetime.now(UTC))
    updated_at = DateTimeField(default=lambda: datetime.now(UTC))
