"""Versioned public API documents for a single service.

Two shapes are produced from the same joined data:

- ``SKELETON`` (versions 1 and 2): links keyed by document name, the ids
  of approved points and a flattened ``pointsData`` map keyed by point id
  (as a string, so the document survives a JSON round-trip unchanged).
- ``FLAT`` (version 3): the service row itself plus every document and
  every point, approved or not, each point carrying its document and case.

Exports are cached as a whole under their own key with a longer TTL than
the per-entity caches they are built from, so the two tiers can disagree
for up to an hour after an edit.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from phoenix import constants
from phoenix.core.cache import CacheService
from phoenix.core.config import Settings
from phoenix.core.logging import get_logger
from phoenix.services.phoenix import PhoenixService
from phoenix.services.store import Row

logger = get_logger(__name__)

_MISSING = object()


class ExportShape(str, Enum):
    SKELETON = "skeleton"
    FLAT = "flat"


def shape_for_version(version: int) -> ExportShape:
    if version in constants.SKELETON_VERSIONS:
        return ExportShape.SKELETON
    if version in constants.FLAT_VERSIONS:
        return ExportShape.FLAT
    raise ValueError(f"Unsupported export version: {version}")


def split_urls(url: Optional[str]) -> List[str]:
    """Split on the literal comma; segments are neither trimmed nor dropped."""
    return (url or "").split(",")


def service_class(service: Row) -> Any:
    """Public rating, or False when unrated or not comprehensively reviewed."""
    rating = service.get("rating")
    if rating == constants.UNRATED_CLASS:
        return False
    return rating if service.get("is_comprehensively_reviewed") else False


@dataclass
class ServiceBundle:
    """A service joined with its documents, points and the cases they use."""

    service: Dict[str, Any]
    documents: List[Row]
    points: List[Row]
    cases: Dict[int, Optional[Row]]
    image_url: str

    def document_for(self, point: Row) -> Optional[Row]:
        for document in self.documents:
            if document["id"] == point.get("document_id"):
                return document
        return None

    def case_for(self, point: Row) -> Optional[Row]:
        return self.cases.get(point.get("case_id"))


def _is_approved(point: Row) -> bool:
    return point.get("status") == constants.APPROVED_STATUS


def build_skeleton(bundle: ServiceBundle, discussion_url: str) -> Dict[str, Any]:
    service = bundle.service
    links = {
        document["name"]: {"name": document["name"], "url": document["url"]}
        for document in bundle.documents
    }
    approved = [point for point in bundle.points if _is_approved(point)]

    points_data = {}
    for point in approved:
        document = bundle.document_for(point) or {}
        case = bundle.case_for(point) or {}
        points_data[str(point["id"])] = {
            "discussion": f"{discussion_url}{point['id']}",
            "id": point["id"],
            "needsModeration": False,
            "quoteDoc": document.get("name"),
            "quoteText": point.get("quoteText"),
            "services": [service["id"]],
            "set": constants.EXPORT_SET_FIELD,
            "slug": point.get("slug"),
            "title": point.get("title"),
            "topics": [],
            "tosdr": {
                "binding": True,
                "case": case.get("title"),
                "point": case.get("classification"),
                "score": case.get("score"),
                "tldr": point.get("analysis"),
            },
        }

    return {
        "id": service["id"],
        "name": service["name"],
        "slug": service.get("slug"),
        "image": bundle.image_url,
        "class": service_class(service),
        "links": links,
        "points": [point["id"] for point in approved],
        "pointsData": points_data,
        "urls": split_urls(service.get("url")),
    }


def build_flat(bundle: ServiceBundle, discussion_url: str) -> Dict[str, Any]:
    service = bundle.service
    points = [
        {
            "discussion": f"{discussion_url}{point['id']}",
            "id": point["id"],
            "needsModeration": not _is_approved(point),
            "document": bundle.document_for(point),
            "quote": point.get("quoteText"),
            "services": [service["id"]],
            "set": constants.EXPORT_SET_FIELD,
            "slug": point.get("slug"),
            "title": point.get("title"),
            "topics": [],
            "case": bundle.case_for(point),
        }
        for point in bundle.points
    ]

    return {
        **service,
        "image": bundle.image_url,
        "documents": bundle.documents,
        "points": points,
        "urls": split_urls(service.get("url")),
    }


ASSEMBLERS: Dict[ExportShape, Callable[[ServiceBundle, str], Dict[str, Any]]] = {
    ExportShape.SKELETON: build_skeleton,
    ExportShape.FLAT: build_flat,
}


class ApiExporter:
    """Builds and caches the per-service API documents."""

    def __init__(self, phoenix: PhoenixService, cache: CacheService, settings: Settings):
        self.phoenix = phoenix
        self.cache = cache
        self.settings = settings

    async def load_bundle(self, service_id: int, shape: ExportShape) -> Optional[ServiceBundle]:
        service = await self.phoenix.get_service(service_id)
        if service is None:
            return None

        points = await self.phoenix.get_points_by_service(service_id)
        documents = await self.phoenix.get_documents_by_service(service_id)

        wanted = points if shape is ExportShape.FLAT else [p for p in points if _is_approved(p)]
        cases: Dict[int, Optional[Row]] = {}
        for point in wanted:
            case_id = point.get("case_id")
            if case_id is not None and case_id not in cases:
                cases[case_id] = await self.phoenix.get_case(case_id)

        return ServiceBundle(
            service=service,
            documents=documents,
            points=points,
            cases=cases,
            image_url=f"{self.settings.s3_logos}/{service['image']}",
        )

    async def generate(self, service_id: int, version: int = 1) -> Optional[Dict[str, Any]]:
        """Export for ``service_id`` in the given API version, or None if unknown.

        Raises ValueError for versions other than 1, 2 and 3.
        """
        shape = shape_for_version(version)
        key = constants.KEY_EXPORT.format(service_id, version)

        cached = await self.cache.get(key, default=_MISSING)
        if cached is not _MISSING:
            return cached

        bundle = await self.load_bundle(service_id, shape)
        if bundle is None:
            logger.info("Export requested for unknown service", service_id=service_id, version=version)
            return None

        export = ASSEMBLERS[shape](bundle, self.settings.phoenix_discussion_url)

        if not await self.cache.set(key, export, self.settings.export_cache_ttl):
            logger.warning("Cache write failed, serving uncached export", cache_key=key)
        logger.debug("Export generated", service_id=service_id, version=version, shape=shape.value)
        return export
