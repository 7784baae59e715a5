"""Models reconciled at startup and the indexes declared outside their meta.

TTL and text indexes are not declared in the documents' ``meta``:
mongoengine would create them with ``ensure_indexes`` and fail on any option
drift, while the reconcilers repair them in place.
"""

from mongoengine import Document
from pydantic import BaseModel, ConfigDict, Field

from ..config import config
from ..types import IndexSpec, TextIndexSpec, TTLIndexSpec
from .category import Category
from .notification import Notification
from .token import Token
from .user import User
from .value import Value


class ModelRegistration(BaseModel):
    """A document class and the indexes reconciled for it"""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    document: type[Document]
    indexes: list[IndexSpec] = Field(default_factory=list)
    text_indexes: list[TextIndexSpec] = Field(default_factory=list)
    ttl_indexes: list[TTLIndexSpec] = Field(default_factory=list)

    @property
    def name(self) -> str:
        return self.document.__name__


def default_registry() -> list[ModelRegistration]:
    """Registrations built from the current configuration"""
    return [
        ModelRegistration(
            document=Value,
            text_indexes=[TextIndexSpec(field="value", name="value_text")],
        ),
        ModelRegistration(document=Category),
        ModelRegistration(
            document=User,
            text_indexes=[
                TextIndexSpec(field="full_name", name="full_name_text")
            ],
            ttl_indexes=[
                TTLIndexSpec(
                    field="expire_at",
                    expire_after_seconds=config.user_expire_seconds,
                )
            ],
        ),
        ModelRegistration(
            document=Token,
            ttl_indexes=[
                TTLIndexSpec(
                    field="expire_at",
                    expire_after_seconds=config.token_expire_seconds,
                )
            ],
        ),
        ModelRegistration(
            document=Notification,
            indexes=[
                IndexSpec(
                    name="user_id_1_created_at_-1",
                    keys=[("user_id", 1), ("created_at", -1)],
                )
            ],
            ttl_indexes=[
                TTLIndexSpec(
                    field="created_at",
                    expire_after_seconds=config.notification_expire_seconds,
                )
            ],
        ),
    ]
