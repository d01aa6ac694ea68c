"""Data models for headings and the table of contents tree."""

from pydantic import BaseModel, Field

ROOT = 0


class Heading(BaseModel):
    """Single heading extracted from a document."""

    level: int = Field(ge=0)
    title: str
    href: str | None = None  # documentHref[#fragment], None when no safe target


class Page(BaseModel):
    """Headings of one spine document."""

    href: str
    headings: list[Heading] = Field(default_factory=list)


class TocNode(BaseModel):
    """Node of the ToC arena. Links are indices into TocTree.nodes."""

    title: str = ""
    href: str | None = None
    level: int = -1  # -1 for the virtual root
    page_href: str | None = None
    parent: int | None = None
    children: list[int] = Field(default_factory=list)
    placeholder: bool = False


class TOCEntry(BaseModel):
    """Serialized entry of the table of contents."""

    title: str
    href: str | None = None
    children: list["TOCEntry"] = Field(default_factory=list)


class TocTree(BaseModel):
    """ToC tree stored as a flat arena; nodes[0] is the virtual root."""

    nodes: list[TocNode] = Field(default_factory=lambda: [TocNode()])
    warnings: list[str] = Field(default_factory=list)

    def roots(self) -> list[int]:
        return self.nodes[ROOT].children

    def last_child(self, index: int) -> int | None:
        children = self.nodes[index].children
        return children[-1] if children else None

    def add(self, parent: int, node: TocNode) -> int:
        """Append node as the last child of parent and return its index."""
        node.parent = parent
        self.nodes.append(node)
        index = len(self.nodes) - 1
        self.nodes[parent].children.append(index)
        return index

    def walk(self, index: int = ROOT):
        """Yield (index, node) in pre-order, skipping the virtual root."""
        for child in self.nodes[index].children:
            yield child, self.nodes[child]
            yield from self.walk(child)

    def first_href(self, index: int) -> str | None:
        """Href of the node, or of its first linked descendant."""
        node = self.nodes[index]
        if node.href:
            return node.href
        for _, descendant in self.walk(index):
            if descendant.href:
                return descendant.href
        return None

    def entries(self, index: int = ROOT) -> list[TOCEntry]:
        return [
            TOCEntry(
                title=self.nodes[child].title,
                href=self.nodes[child].href,
                children=self.entries(child),
            )
            for child in self.nodes[index].children
        ]

    def __len__(self) -> int:
        return len(self.nodes) - 1
