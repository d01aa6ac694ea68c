"""Data models for the OPF package descriptor."""

from pydantic import BaseModel, Field


class ManifestItem(BaseModel):
    """Single manifest <item>."""

    id: str
    media_type: str
    href: str
    is_nav: bool = False


class Manifest(BaseModel):
    """Manifest items (sorted by id) and spine itemrefs (reading order)."""

    items: list[ManifestItem] = Field(default_factory=list)
    spine_refs: list[str] = Field(default_factory=list)
    ncx_id: str | None = None
    warnings: list[str] = Field(default_factory=list)

    def get(self, item_id: str) -> ManifestItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None
