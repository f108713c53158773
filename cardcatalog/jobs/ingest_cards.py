"""
Catalog ingestion job.

Fetches the card catalog and writes the local snapshot. Run it before
serving traffic with remote fetch disabled, or from a scheduler.

Usage:
    python -m cardcatalog.jobs.ingest_cards            # base variant
    python -m cardcatalog.jobs.ingest_cards --all      # all variant
    python -m cardcatalog.jobs.ingest_cards --base --all
    python -m cardcatalog.jobs.ingest_cards --import-file snapshot.json --no-fetch
"""

import argparse
import asyncio
import logging
import sys
from functools import partial
from pathlib import Path

from cardcatalog.db.database import init_db, snapshot_store
from cardcatalog.db.snapshot_store import SnapshotStore
from cardcatalog.models.card import DatasetVariant
from cardcatalog.parsers.snapshot_file import load_snapshot_file, save_snapshot_file
from cardcatalog.services.fetcher import build_client, fetch_cards_from_sources
from cardcatalog.services.refresh import RefreshOutcome, refresh_snapshot

logger = logging.getLogger(__name__)


async def import_snapshot(store: SnapshotStore, path: Path) -> dict[DatasetVariant, int]:
    """
    Seed the store from a snapshot document.

    Variants with no cards in the document are left untouched.

    Returns:
        Dict mapping variant to number of cards imported
    """
    snapshot = load_snapshot_file(path)
    imported: dict[DatasetVariant, int] = {}
    for variant in DatasetVariant:
        cards = snapshot.dataset(variant).cards
        if not cards:
            continue
        await store.write(variant, cards)
        imported[variant] = len(cards)
        logger.info("Imported %d %s cards from %s", len(cards), variant.value, path)
    return imported


async def export_snapshot(store: SnapshotStore, path: Path) -> Path:
    """Write the store's current snapshot to a document on disk."""
    snapshot = await store.read()
    save_snapshot_file(snapshot, path)
    logger.info("Exported snapshot (updatedAt=%d) to %s", snapshot.updated_at, path)
    return path


async def run_ingest(
    variants: list[DatasetVariant],
    store: SnapshotStore,
) -> dict[DatasetVariant, RefreshOutcome]:
    """
    Refresh the given variants one after another.

    Args:
        variants: Variants to refresh
        store: Snapshot store to persist into

    Returns:
        Dict mapping variant to its refresh outcome
    """
    results: dict[DatasetVariant, RefreshOutcome] = {}

    async with build_client() as client:
        fetch = partial(fetch_cards_from_sources, client=client)
        for variant in variants:
            logger.info("Refreshing %s snapshot...", variant.value)
            results[variant] = await refresh_snapshot(variant, store, fetch)

    snapshot = await store.read()
    for variant, outcome in results.items():
        logger.info(
            "%s -> %d cards (updatedAt=%d, source=%s)",
            variant.value,
            len(outcome.attempt.cards),
            snapshot.dataset(variant).updated_at,
            outcome.attempt.source or "n/a",
        )
        if outcome.attempt.errors:
            logger.warning(
                "%s warnings:\n- %s", variant.value, "\n- ".join(outcome.attempt.errors)
            )

    return results


def selected_variants(args: argparse.Namespace) -> list[DatasetVariant]:
    """Base is refreshed unless only --all was requested."""
    variants: list[DatasetVariant] = []
    if args.base or not args.all:
        variants.append(DatasetVariant.BASE)
    if args.all:
        variants.append(DatasetVariant.ALL)
    return variants


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ingest the card catalog into the local snapshot")
    parser.add_argument("--base", action="store_true", help="Refresh the base variant")
    parser.add_argument("--all", action="store_true", help="Refresh the all variant")
    parser.add_argument("--import-file", type=Path, help="Seed the snapshot from a JSON document")
    parser.add_argument("--export-file", type=Path, help="Write the snapshot to a JSON document")
    parser.add_argument(
        "--no-fetch",
        action="store_true",
        help="Skip the remote refresh (import/export only)",
    )
    return parser


async def run(args: argparse.Namespace, store: SnapshotStore) -> int:
    """Execute the job; returns the process exit code."""
    if args.import_file:
        await import_snapshot(store, args.import_file)

    exit_code = 0
    if not args.no_fetch:
        results = await run_ingest(selected_variants(args), store)
        total = sum(len(outcome.attempt.cards) for outcome in results.values())
        if total == 0:
            logger.error("No cards fetched. Check connectivity or source availability.")
            exit_code = 1

    if args.export_file:
        await export_snapshot(store, args.export_file)

    return exit_code


async def _main(argv: list[str] | None) -> int:
    args = build_parser().parse_args(argv)
    await init_db()
    return await run(args, snapshot_store)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    sys.exit(asyncio.run(_main(argv)))


if __name__ == "__main__":
    main()
