from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Catalog export ---

class Variant(BaseModel):
    id: str
    title: Optional[str] = None
    sku: Optional[str] = None


class Product(BaseModel):
    """A storefront product as returned by the products connection."""

    id: str
    title: str = ""
    handle: str = ""
    vendor: str = ""
    description: str = ""
    featured_image_url: Optional[str] = None
    variants: List[Variant] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> "Product":
        image = node.get("featuredImage") or {}
        variant_edges = (node.get("variants") or {}).get("edges") or []
        return cls(
            id=node["id"],
            title=node.get("title") or "",
            handle=node.get("handle") or "",
            vendor=node.get("vendor") or "",
            description=node.get("description") or "",
            featured_image_url=image.get("originalSrc"),
            variants=[Variant(**edge["node"]) for edge in variant_edges],
        )


class PageInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_next_page: bool = Field(alias="hasNextPage")
    # Opaque; passed back as ``after`` without inspection
    end_cursor: Optional[str] = Field(default=None, alias="endCursor")


class ProductPage(BaseModel):
    products: List[Product]
    page_info: PageInfo

    @classmethod
    def from_connection(cls, connection: Dict[str, Any]) -> "ProductPage":
        edges = connection.get("edges") or []
        return cls(
            products=[Product.from_node(edge["node"]) for edge in edges],
            page_info=PageInfo.model_validate(connection["pageInfo"]),
        )


class ExportRecord(BaseModel):
    """Flattened product row sent to the sheet service.

    Serialised with the sheet's column keys (``CatNo``, ``featuredImage``).
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    artist: str
    catalog_number: str = Field(alias="CatNo")
    description: str
    featured_image_url: str = Field(alias="featuredImage")

    def to_sheet_row(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True)


# --- Metafield import ---

class ImportRow(BaseModel):
    """One row of the metafield template CSV."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    handle: str = Field(alias="Handle")
    tracklist: str = Field(default="", alias="Tracklist")
    format: str = Field(default="", alias="Format")
    label: str = Field(default="", alias="Label")
    release_year: str = Field(default="", alias="ReleaseYear")
    description: str = Field(default="", alias="Description")

    @field_validator("handle", "tracklist", "format", "label", "release_year", "description", mode="before")
    @classmethod
    def none_to_empty_string(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)


class MetafieldAssignment(BaseModel):
    key: str
    type: str
    value: str

    def to_input(self, owner_id: str, namespace: str) -> Dict[str, str]:
        """Build a ``MetafieldsSetInput`` for the given owner."""
        return {
            "ownerId": owner_id,
            "namespace": namespace,
            "key": self.key,
            "type": self.type,
            "value": self.value,
        }


class UserError(BaseModel):
    field: Optional[List[str]] = None
    message: str

    def __str__(self) -> str:
        if self.field:
            return f"{'.'.join(self.field)}: {self.message}"
        return self.message


class RowState(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    DESCRIPTION_SKIPPED = "description_skipped"
    DESCRIPTION_DONE = "description_done"
    DONE = "done"
    SKIPPED = "skipped"


class RowResult(BaseModel):
    handle: str
    product_id: Optional[str] = None
    state: RowState = RowState.PENDING
    description_state: Optional[RowState] = None
    description_errors: List[UserError] = Field(default_factory=list)
    metafield_errors: List[UserError] = Field(default_factory=list)
    metafields_sent: int = 0


class ImportSummary(BaseModel):
    total: int = 0
    done: int = 0
    skipped: int = 0
    descriptions_updated: int = 0
    description_errors: int = 0
    metafield_errors: int = 0
    results: List[RowResult] = Field(default_factory=list)

    def add(self, result: RowResult) -> None:
        self.total += 1
        self.results.append(result)
        if result.state == RowState.SKIPPED:
            self.skipped += 1
            return
        self.done += 1
        if result.description_state == RowState.DESCRIPTION_DONE and not result.description_errors:
            self.descriptions_updated += 1
        if result.description_errors:
            self.description_errors += 1
        if result.metafield_errors:
            self.metafield_errors += 1
