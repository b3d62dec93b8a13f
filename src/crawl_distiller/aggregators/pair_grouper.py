"""Grouping of listed objects into page pairs."""

import logging
from collections.abc import Iterable

from schemas.storage import FilePair, PairFile, StorageObject, make_pair_id

logger = logging.getLogger(__name__)

MIN_KEY_SEGMENTS = 3


def group_objects(objects: Iterable[StorageObject]) -> dict[str, FilePair]:
    """Partition objects into pairs keyed by ``domain/content_hash``.

    Keys with fewer than three ``/``-separated segments are dropped without
    being reported. Files within each pair are ordered by filename.

    Args:
        objects: Listed objects, in any order

    Returns:
        Mapping of pair identity to FilePair
    """
    pairs: dict[str, FilePair] = {}
    dropped = 0

    for obj in objects:
        parts = obj.path_parts
        if len(parts) < MIN_KEY_SEGMENTS:
            dropped += 1
            continue

        domain, content_hash = parts[1], parts[2]
        filename = parts[3] if len(parts) > 3 else ""
        pair_id = make_pair_id(domain, content_hash)

        pair = pairs.get(pair_id)
        if pair is None:
            pair = FilePair(domain=domain, content_hash=content_hash)
            pairs[pair_id] = pair

        pair.files.append(
            PairFile(
                key=obj.key,
                filename=filename,
                size=obj.size,
                last_modified=obj.last_modified,
            )
        )

    for pair in pairs.values():
        pair.files.sort(key=lambda f: f.filename)

    if dropped:
        logger.debug(f"Ignored {dropped} keys that do not match <domain>/<hash>/<file>")

    return pairs


def classify_pairs(
    pairs: dict[str, FilePair],
    html_filename: str,
    metadata_filename: str,
) -> dict[str, FilePair]:
    """Flag each pair as complete or broken.

    A pair is broken when it has the HTML document but no metadata, and
    complete when it has both. Metadata-only pairs are neither.
    """
    for pair in pairs.values():
        filenames = pair.filenames
        has_html = html_filename in filenames
        has_metadata = metadata_filename in filenames

        pair.is_broken = has_html and not has_metadata
        pair.is_complete = has_html and has_metadata

    return pairs
