"""Centralized constants for cache keys, TTLs and export fields.

Single source of truth for the cache key namespace shared by every
accessor, so keys written by one component are readable by another.
"""

from typing import FrozenSet

# =============================================================================
# CACHE KEYS (store-backed read-through)
# =============================================================================

KEY_POINTS_BY_SERVICE = "pg_pointsbyservice_{}"
KEY_DOCUMENTS_BY_SERVICE = "pg_getdocumentbyservice_{}"
KEY_POINTS = "pg_points"
KEY_CASE = "pg_case_{}"
KEY_TOPIC = "pg_topic_{}"
KEY_SEARCH_SERVICE_BY_NAME = "pg_searchservicebyname_{}"
KEY_SERVICE_BY_SLUG = "pg_getservicebyslug_{}"
KEY_SERVICE = "pg_service_{}"
KEY_TOPICS = "pg_topics"
KEY_CASES = "pg_cases"
KEY_SERVICES = "pg_services"
KEY_POINT_EXISTS = "pg_pointexists_{}"
KEY_SERVICE_EXISTS = "pg_serviceexists_{}"
KEY_EXPORT = "pg_generateapifiles_{}_{}"

# =============================================================================
# LEGACY REMOTE API (cache keys are relative to the configured endpoint)
# =============================================================================

LEGACY_KEY_POINT = "{}/points/id/{}"
LEGACY_KEY_CASE = "{}/cases/id/{}"
LEGACY_KEY_TOPIC = "{}/topics/id/{}"
LEGACY_KEY_SERVICE = "{}/services/id/{}"
LEGACY_KEY_SERVICE_NAME = "{}/services/name/{}"
LEGACY_KEY_LIST = "{}/{}"

LEGACY_TTL_ENTITY = 2592000      # 30 days
LEGACY_TTL_SERVICE = 43200       # 12 hours
LEGACY_TTL_SERVICE_NAME = 15778476  # ~6 months
LEGACY_TTL_TOPICS = 86400
LEGACY_TTL_CASES = 3600
LEGACY_TTL_SERVICES = 3600

LEGACY_MAX_REDIRECTS = 10

# =============================================================================
# EXPORTS
# =============================================================================

APPROVED_STATUS = "approved"
EXPORT_SET_FIELD = "set+service+and+topic"
UNRATED_CLASS = "N/A"

SKELETON_VERSIONS: FrozenSet[int] = frozenset([1, 2])
FLAT_VERSIONS: FrozenSet[int] = frozenset([3])

# =============================================================================
# LOGOS
# =============================================================================

LOGO_URL_PREFIX = "/img/logo/"
LOGO_EXTENSIONS = (".svg", ".png")
