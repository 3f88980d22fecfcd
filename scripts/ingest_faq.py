"""Ingest the FAQ into a FAISS index using TF-IDF embeddings."""

from __future__ import annotations

import argparse
from pathlib import Path

from basicbot.services.faq import build_embeddings, load_entries, write_index

DEFAULT_RAW_PATH = Path("data/faq.json")
DEFAULT_OUTPUT_DIR = Path("db/faiss")
METADATA_FILENAME = "faq_metadata.json"
INDEX_FILENAME = "faq.index"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest FAQ entries into a FAISS index")
    parser.add_argument(
        "--input-file",
        type=Path,
        default=DEFAULT_RAW_PATH,
        help="Path to a JSON array of {question, answer, alternates} entries.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help="Directory where the FAISS index and metadata will be stored.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse input but skip writing FAISS files (useful for validation).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    entries = load_entries(args.input_file)
    print(f"Loaded {len(entries)} FAQ entries from {args.input_file}")

    if args.dry_run:
        _, vocabulary, _ = build_embeddings(entries)
        print(f"Vocabulary size: {len(vocabulary)}")
        print("Dry-run enabled; skipping FAISS write")
        return

    index_path = args.output_dir / INDEX_FILENAME
    metadata_path = args.output_dir / METADATA_FILENAME
    vocabulary_size = write_index(entries, index_path, metadata_path)

    print(f"Vocabulary size: {vocabulary_size}")
    print(f"Wrote index to {index_path}")
    print(f"Wrote metadata to {metadata_path}")


if __name__ == "__main__":
    main()
