"""
Anonymised evidence metadata.

Case documents describe attachments in several ad hoc shapes (a single
`evidenceUrl`, an `evidenceUrls` list, a pre-aggregated `evidence` struct,
or a bare `evidenceType`). They are resolved once into `Evidence` items when
the document is read; the journal only ever sees counts and coarse types,
never a URL or filename.
"""
import posixpath
from typing import Any, Dict, List, Tuple
from urllib.parse import urlparse, unquote

from bua.models.evidence import Evidence, SingleUrl, UrlList, AggregatedCount

IMAGE_EXTS = {"jpg", "jpeg", "png", "gif", "webp", "heic", "heif", "bmp", "svg"}
PDF_EXTS = {"pdf"}
VIDEO_EXTS = {"mp4", "mov", "webm", "avi", "mkv", "m4v"}


def sniff_evidence_type(url: str) -> str:
    """Map a URL to one of image / pdf / video / file by its extension."""
    path = unquote(urlparse(str(url or "")).path)
    name = posixpath.basename(path)
    ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    if ext in IMAGE_EXTS:
        return "image"
    if ext in PDF_EXTS:
        return "pdf"
    if ext in VIDEO_EXTS:
        return "video"
    return "file"


def evidence_from_fields(data: Dict[str, Any]) -> List[Evidence]:
    items: List[Evidence] = []
    explicit_type = data.get("evidenceType")
    explicit_type = str(explicit_type) if explicit_type else None

    url = data.get("evidenceUrl")
    if url:
        items.append(SingleUrl(url=str(url), type=explicit_type))

    urls = data.get("evidenceUrls")
    if isinstance(urls, list):
        urls = [str(u) for u in urls if u]
        if urls:
            items.append(UrlList(urls=urls))
            if explicit_type and not url:
                # supplied type is kept alongside the sniffed ones
                items.append(AggregatedCount(count=0, types=[explicit_type]))

    if items:
        # the report form also writes an `evidence` struct for the same upload
        return items

    agg = data.get("evidence")
    if isinstance(agg, dict):
        count = agg.get("count")
        count = count if isinstance(count, int) and not isinstance(count, bool) and count > 0 else 0
        types = agg.get("types")
        types = [str(t) for t in types if t] if isinstance(types, list) else []
        if agg.get("type"):
            types.append(str(agg["type"]))
        if explicit_type and explicit_type not in types:
            types.append(explicit_type)
        if types and count == 0:
            count = 1
        if count or types:
            items.append(AggregatedCount(count=count, types=types))
    elif explicit_type:
        items.append(AggregatedCount(count=1, types=[explicit_type]))

    return items


def summarize_evidence(items: List[Evidence]) -> Tuple[int, List[str]]:
    """Return (count, sorted distinct types) for a case's evidence items."""
    count = 0
    types = set()
    for item in items:
        if isinstance(item, SingleUrl):
            count += 1
            types.add(item.type or sniff_evidence_type(item.url))
        elif isinstance(item, UrlList):
            count += len(item.urls)
            types.update(sniff_evidence_type(u) for u in item.urls)
        elif isinstance(item, AggregatedCount):
            count += item.count
            types.update(item.types)
    return count, sorted(types)
