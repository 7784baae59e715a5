from mongoengine import StringField
from mongoengine_plus.aio import AsyncDocument
from mongoengine_plus.models import BaseModel, uuid_field


class Value(BaseModel, AsyncDocument):
    """Translated label, one record per language"""

    meta = {
        "collection": "values",
        "indexes": ["language"],
        "auto_create_index": False,
    }

    id = StringField(primary_key=True, default=uuid_field("VAL_"))
    language = StringField(required=True, min_length=2, max_length=2)
    value = StringField(required=True)
