"""Assign deterministic manifest ids to the files of a package."""

import logging

from html2epub.core.descriptor import (
    DEFAULT_MEDIA_TYPE,
    NCX_MEDIA_TYPE,
    OPF_MEDIA_TYPE,
    XHTML_MEDIA_TYPE,
    guess_media_type,
)
from html2epub.models.manifest import Manifest, ManifestItem

log = logging.getLogger(__name__)

NAV_DOCUMENT = "toc.xhtml"


def zero_pad(prefix: str, number: int, digits: int) -> str:
    """zero_pad("page_", 3, 2) -> "page_03"."""
    return f"{prefix}{number:0{digits}d}"


def build_manifest(files: list[str], spine: list[str]) -> Manifest:
    """Build manifest items and spine itemrefs.

    Args:
        files: Every file of the package, relative to the OPF directory
        spine: Reading order, a subset of ``files``

    Returns:
        Manifest with items sorted by id and spine refs in spine order.
        Spine documents get ``page_N`` ids (N = spine position), the NCX
        gets ``ncx``, other files get ``res_N`` (N = position in ``files``).
        The OPF itself is left out. The first NCX gets the ``ncx`` id and
        additional ones are reported and listed as resources; the spine
        links the NCX only when exactly one was found.
    """
    digits = len(str(len(files)))
    positions = {href: index for index, href in reversed(list(enumerate(spine)))}
    manifest = Manifest()
    ncx_count = 0

    for index, href in enumerate(files):
        media_type = guess_media_type(href)

        if href in positions:
            item_id = zero_pad("page_", positions[href] + 1, digits)
            if media_type == DEFAULT_MEDIA_TYPE:
                # extensionless pages, e.g. https://site/chapter/1
                media_type = XHTML_MEDIA_TYPE
        elif media_type == NCX_MEDIA_TYPE and ncx_count == 0:
            item_id = "ncx"
            ncx_count += 1
        elif media_type == NCX_MEDIA_TYPE:
            # first one wins, the others are listed as plain resources
            ncx_count += 1
            message = f"several NCX files have been found: {href}"
            log.warning(message)
            manifest.warnings.append(message)
            item_id = zero_pad("res_", index + 1, digits)
        elif media_type == OPF_MEDIA_TYPE:
            continue
        else:
            item_id = zero_pad("res_", index + 1, digits)

        manifest.items.append(
            ManifestItem(
                id=item_id,
                media_type=media_type,
                href=href,
                is_nav=href == NAV_DOCUMENT,
            )
        )

    manifest.items.sort(key=lambda item: item.id)
    manifest.spine_refs = [
        zero_pad("page_", index + 1, digits) for index in range(len(spine))
    ]
    if ncx_count == 1:
        manifest.ncx_id = "ncx"

    return manifest
