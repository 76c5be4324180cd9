"""Value objects for credentials, classified queries and load results."""

from .models import (
    LEGACY_VOCABULARY,
    UNKNOWN_AUTHOR,
    V4_VOCABULARY,
    CatalogResult,
    ClassifiedQuery,
    Credential,
    EntityType,
    LoadException,
    LoadResult,
    NormalizedEntity,
    ResultVocabulary,
)

__all__ = [
    "CatalogResult",
    "ClassifiedQuery",
    "Credential",
    "EntityType",
    "LEGACY_VOCABULARY",
    "LoadException",
    "LoadResult",
    "NormalizedEntity",
    "ResultVocabulary",
    "UNKNOWN_AUTHOR",
    "V4_VOCABULARY",
]
