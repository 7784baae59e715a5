"""Reconciliation of the language reference data.

Every value must be written in a supported language. Values in any other
language are removed with a single bulk delete, whether or not a category
still references them; categories themselves are never deleted here.
"""

from collections.abc import Iterable
from typing import NamedTuple, Protocol

from loguru import logger

from ...config import config
from ...models.category import Category
from ...models.value import Value
from ..database import ConnectionManager


class SeedValue(NamedTuple):
    id: str
    language: str
    value: str


class SeedCategory(NamedTuple):
    id: str
    values: list[str]


class SeedDataStore(Protocol):
    """Storage operations needed to reconcile categories and values"""

    def delete_values_not_in(self, languages: list[str]) -> int: ...

    def categories(self) -> Iterable[SeedCategory]: ...

    def values_of(self, category: SeedCategory) -> list[SeedValue]: ...

    def add_value(
        self, category: SeedCategory, language: str, value: str
    ) -> str: ...


class DocumentSeedStore:
    """``SeedDataStore`` backed by the mongoengine documents"""

    def delete_values_not_in(self, languages: list[str]) -> int:
        # One delete_many on the server, no per-document round trips
        return Value.objects(language__nin=languages).delete()

    def categories(self) -> list[SeedCategory]:
        return [
            SeedCategory(category.id, list(category.values))
            for category in Category.objects.only("id", "values")
        ]

    def values_of(self, category: SeedCategory) -> list[SeedValue]:
        return [
            SeedValue(value.id, value.language, value.value)
            for value in Value.objects(id__in=category.values)
        ]

    def add_value(
        self, category: SeedCategory, language: str, value: str
    ) -> str:
        record = Value(language=language, value=value).save()
        Category.objects(id=category.id).update_one(push__values=record.id)
        return record.id


def backfill_category(
    store: SeedDataStore,
    category: SeedCategory,
    languages: list[str],
    default_language: str,
) -> int:
    """Add a value for each supported language the category lacks

    Missing translations are copied from the default-language value.

    Returns:
        Number of values added
    """
    values = store.values_of(category)
    present = {value.language for value in values}
    missing = [language for language in languages if language not in present]
    if not missing:
        return 0

    default = next(
        (value for value in values if value.language == default_language),
        None,
    )
    if default is None:
        logger.warning(
            f"Category {category.id} has no '{default_language}' value, "
            f"cannot backfill {missing}"
        )
        return 0

    for language in missing:
        store.add_value(category, language, default.value)
    logger.info(f"Backfilled {missing} values of category {category.id}")
    return len(missing)


def initialize_categories(
    db: ConnectionManager,
    store: SeedDataStore | None = None,
    languages: list[str] | None = None,
    default_language: str | None = None,
) -> bool:
    """Remove values in unsupported languages and backfill categories

    Args:
        db: Connection the documents are stored through
        store: Storage operations, defaults to the mongoengine documents
        languages: Supported languages, defaults to the configured ones
        default_language: Language copied into missing translations

    Returns:
        True on success, False if disconnected or any step failed
    """
    if not db.is_connected:
        logger.warning("Cannot initialize categories: database not connected")
        return False

    if store is None:
        store = DocumentSeedStore()
    if languages is None:
        languages = config.supported_languages
    if default_language is None:
        default_language = config.default_language

    try:
        deleted = store.delete_values_not_in(languages)
        if deleted:
            logger.info(
                f"Deleted {deleted} values in unsupported languages "
                f"(supported: {', '.join(languages)})"
            )

        added = sum(
            backfill_category(store, category, languages, default_language)
            for category in store.categories()
        )
        if added:
            logger.info(f"Added {added} missing category values")
    except Exception as e:  # noqa: BLE001
        logger.error(f"Failed to initialize categories: {e}")
        return False

    return True
