#!/usr/bin/env python
"""
Draw a uniform random sample from one or more JSONL files.

Each input file is sampled independently as its own partition; the partition
samples are then merged by their random ranking value, so the result is a
uniform sample over all inputs.

Usage:
    python scripts/sample_jsonl.py --input data.jsonl --size 100
    python scripts/sample_jsonl.py --input a.jsonl b.jsonl --config configs/sample/default.yaml
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any

# Add project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dotenv import load_dotenv

from docsample import (
    Document,
    IteratorSource,
    SampleError,
    SampleStage,
    load_sample_config,
    merge_samples,
    parse_sample_spec,
)

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def read_jsonl(path: Path) -> Iterator[dict[str, Any]]:
    """Yield one JSON object per non-empty line of ``path``."""
    with path.open("r", encoding="utf-8") as fh:
        for line_no, line in enumerate(fh, start=1):
            line = line.strip()
            if not line:
                continue
            record = json.loads(line)
            if not isinstance(record, dict):
                raise ValueError(f"{path}:{line_no}: expected a JSON object")
            yield record


def sample_partition(path: Path, size: int, seed: int | None) -> list[Document]:
    """Sample ``size`` documents from a single JSONL file."""
    stage = SampleStage(size, seed=seed)
    stage.set_source(IteratorSource(read_jsonl(path)))
    docs = list(stage)
    logger.info("Sampled %d documents from %s", len(docs), path)
    return docs


def write_jsonl(docs: list[Document], rand_field: str | None, out: Any) -> None:
    for doc in docs:
        record = doc.to_dict()
        if rand_field:
            record[rand_field] = doc.rand_meta
        out.write(json.dumps(record) + "\n")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Uniformly sample records from JSONL files")
    parser.add_argument("--input", type=str, nargs="+", required=True)
    parser.add_argument("--size", type=int, default=None)
    parser.add_argument("--config", type=str, default=None, help="YAML $sample spec")
    parser.add_argument("--output", type=str, default=None)
    parser.add_argument("--rand-field", type=str, default="$rand")
    parser.add_argument("--seed", type=int, default=None, help="defaults to $DOCSAMPLE_SEED")
    args = parser.parse_args(argv)

    load_dotenv()
    if args.seed is None and os.environ.get("DOCSAMPLE_SEED"):
        args.seed = int(os.environ["DOCSAMPLE_SEED"])

    try:
        if args.size is not None:
            spec = parse_sample_spec({"size": args.size})
        elif args.config is not None:
            spec = load_sample_config(args.config)
        else:
            parser.error("one of --size or --config is required")
    except SampleError as e:
        logger.error("%s (code %d)", e.message, e.code)
        return 2

    seed_seq = [None] * len(args.input) if args.seed is None else [
        args.seed + i for i in range(len(args.input))
    ]
    partitions = [
        sample_partition(Path(p), spec.size, seed) for p, seed in zip(args.input, seed_seq)
    ]
    docs = merge_samples(partitions, spec.size)
    logger.info("Merged %d partitions into %d documents", len(partitions), len(docs))

    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with out_path.open("w", encoding="utf-8") as fh:
            write_jsonl(docs, args.rand_field, fh)
        logger.info("Wrote %s", out_path)
    else:
        write_jsonl(docs, args.rand_field, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
