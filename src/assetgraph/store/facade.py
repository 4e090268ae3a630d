"""
Graph query facade consumed by the analysis engines.

The engines never touch storage directly; they only call the queries below.
Every query takes a cutoff: records and relations last seen before it are
excluded, and ``None`` disables the filter. Implementations raise
``StoreQueryError`` for any failure, including unknown identifiers.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional

from .model import Asset, AssetRecord, AssetType, Relation


class GraphStore(ABC):
    """Read-only query interface over a populated asset graph."""

    @abstractmethod
    def find_by_scope(
        self, assets: Iterable[Asset], since: Optional[datetime] = None
    ) -> list[AssetRecord]:
        """Records within the scope of the given assets."""

    @abstractmethod
    def find_by_id(
        self, record_id: str, since: Optional[datetime] = None
    ) -> AssetRecord:
        """The record with the given store identifier."""

    @abstractmethod
    def find_by_content(
        self, asset: Asset, since: Optional[datetime] = None
    ) -> list[AssetRecord]:
        """Records whose asset content equals the given asset."""

    @abstractmethod
    def find_by_type(
        self, asset_type: AssetType, since: Optional[datetime] = None
    ) -> list[AssetRecord]:
        """All records of one asset kind."""

    @abstractmethod
    def outgoing_relations(
        self, record: AssetRecord, since: Optional[datetime] = None, *labels: str
    ) -> list[Relation]:
        """Relations leaving the record, optionally restricted to labels."""

    @abstractmethod
    def incoming_relations(
        self, record: AssetRecord, since: Optional[datetime] = None, *labels: str
    ) -> list[Relation]:
        """Relations entering the record, optionally restricted to labels."""
