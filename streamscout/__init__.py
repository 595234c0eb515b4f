from __future__ import annotations

from streamscout.availability_gateway import StreamingAvailabilityGateway
from streamscout.bundle_analyzer import BundleAnalyzer
from streamscout.cache_store import CacheStore
from streamscout.errors import ErrorKind, InvalidInputError, UpstreamError
from streamscout.movie_resolver import MovieResolver
from streamscout.omdb_gateway import OmdbSearchGateway
from streamscout.quota_tracker import QuotaTracker

__all__ = [
    "BundleAnalyzer",
    "CacheStore",
    "ErrorKind",
    "InvalidInputError",
    "MovieResolver",
    "OmdbSearchGateway",
    "QuotaTracker",
    "StreamingAvailabilityGateway",
    "UpstreamError",
]
