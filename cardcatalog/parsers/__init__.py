from cardcatalog.parsers.html_state import decode_html_payload, extract_embedded_state
from cardcatalog.parsers.payload import (
    build_card,
    collect_known_key_cards,
    deep_collect_cards,
    extract_cards,
)
from cardcatalog.parsers.snapshot_file import (
    SnapshotFileError,
    dump_snapshot_document,
    load_snapshot_file,
    parse_snapshot_document,
    save_snapshot_file,
)

__all__ = [
    "SnapshotFileError",
    "build_card",
    "collect_known_key_cards",
    "decode_html_payload",
    "deep_collect_cards",
    "dump_snapshot_document",
    "extract_cards",
    "extract_embedded_state",
    "load_snapshot_file",
    "parse_snapshot_document",
    "save_snapshot_file",
]
