"""OPF package descriptor rendering and media type lookup."""

import mimetypes
from pathlib import PurePosixPath

from lxml import etree

from html2epub.models.manifest import Manifest

OPF_NS = "http://www.idpf.org/2007/opf"
DC_NS = "http://purl.org/dc/elements/1.1/"

NCX_MEDIA_TYPE = "application/x-dtbncx+xml"
OPF_MEDIA_TYPE = "application/oebps-package+xml"
XHTML_MEDIA_TYPE = "application/xhtml+xml"
DEFAULT_MEDIA_TYPE = "application/octet-stream"

# Types that mimetypes gets wrong, or does not know on every platform
EPUB_MEDIA_TYPES = {
    ".ncx": NCX_MEDIA_TYPE,
    ".opf": OPF_MEDIA_TYPE,
    ".xhtml": XHTML_MEDIA_TYPE,
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".otf": "font/otf",
    ".ttf": "font/ttf",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".mp3": "audio/mpeg",
    ".mp4": "video/mp4",
}


def guess_media_type(href: str) -> str:
    """Media type of a package file, from its extension."""
    suffix = PurePosixPath(href).suffix.lower()
    if suffix in EPUB_MEDIA_TYPES:
        return EPUB_MEDIA_TYPES[suffix]
    media_type, _ = mimetypes.guess_type(href, strict=False)
    return media_type or DEFAULT_MEDIA_TYPE


def render_opf(
    manifest: Manifest,
    identifier: str,
    title: str,
    language: str,
    modified: str,
    dc: dict[str, str] | None = None,
    charset: str = "UTF-8",
) -> str:
    """Render the OPF 3.0 package descriptor (metadata, manifest, spine)."""

    def q(tag: str, ns: str = OPF_NS) -> str:
        return f"{{{ns}}}{tag}"

    package = etree.Element(
        q("package"),
        {"version": "3.0", "unique-identifier": "uuid"},
        nsmap={None: OPF_NS},
    )

    metadata = etree.SubElement(package, q("metadata"), nsmap={"dc": DC_NS})
    etree.SubElement(metadata, q("identifier", DC_NS), id="uuid").text = identifier
    etree.SubElement(metadata, q("title", DC_NS)).text = title
    etree.SubElement(metadata, q("language", DC_NS)).text = language
    for key, value in (dc or {}).items():
        etree.SubElement(metadata, q(key, DC_NS)).text = value
    etree.SubElement(metadata, q("meta"), property="dcterms:modified").text = modified

    items = etree.SubElement(package, q("manifest"))
    for item in manifest.items:
        attrib = {"id": item.id, "media-type": item.media_type, "href": item.href}
        if item.is_nav:
            attrib["properties"] = "nav"
        etree.SubElement(items, q("item"), attrib)

    spine = etree.SubElement(package, q("spine"))
    if manifest.ncx_id:
        spine.set("toc", manifest.ncx_id)
    for idref in manifest.spine_refs:
        etree.SubElement(spine, q("itemref"), idref=idref)

    data = etree.tostring(
        package, xml_declaration=True, encoding=charset, pretty_print=True
    )
    return data.decode(charset)
