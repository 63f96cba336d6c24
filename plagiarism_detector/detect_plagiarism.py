#!/usr/bin/env python3
"""Structural plagiarism detection for C/C++ source files.

Every file under ROOT is:
1. Tokenized with identifiers and literals collapsed to generic markers
2. Parsed into an abstract syntax tree
3. Reduced to a set of canonical subtree hashes (for loops hash as their
   while rewrite; commutative and mirrored comparisons hash alike)

Every pair of files is then scored by Jaccard similarity of their
fingerprint sets and flagged at or above the threshold. Results are written
as JSON and CSV, optionally as HTML and a heatmap.
"""

from __future__ import annotations

import argparse
import concurrent.futures
import csv
import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError
from tqdm import tqdm

from .fingerprints import collect_fingerprints
from .generate_plagiarism_html import generate_html_report
from .models import (
    DetectorConfig,
    DocumentRecord,
    DocumentStatus,
    PairResult,
    PlagiarismReport,
    ReportSummary,
    Verdict,
)
from .parser import SourceSyntaxError, parse
from .similarity import classify, is_flagged, jaccard_similarity
from .syntax_tree import format_tree
from .tokenizer import tokenize
from .visualize_similarity import load_similarity_matrix, plot_heatmap

logger = logging.getLogger(__name__)

CSV_FIELDS = [
    "document1",
    "document2",
    "similarity",
    "shared_fingerprints",
    "union_fingerprints",
    "flagged",
    "verdict",
]


# ---------------------------------------------------------------------------
# Document analysis
# ---------------------------------------------------------------------------
def gather_source_files(root: Path, config: DetectorConfig) -> List[Tuple[Path, str]]:
    """Return ``(path, label)`` for every matching file, sorted by label."""
    if root.is_file():
        return [(root, root.name)]

    extensions = set(config.extensions)
    skip_dirs = set(config.skip_dirs)
    found: List[Tuple[Path, str]] = []
    for dirpath, dirs, files in os.walk(root):
        dirs[:] = sorted(d for d in dirs if d not in skip_dirs)
        for file_name in files:
            if Path(file_name).suffix.lower() not in extensions:
                continue
            full_path = Path(dirpath) / file_name
            found.append((full_path, full_path.relative_to(root).as_posix()))
    return sorted(found, key=lambda item: item[1])


def analyze_document(path: Path, label: str, min_tokens: int = 5) -> DocumentRecord:
    """Fingerprint one file. Never raises for bad input; the status says why."""
    record = DocumentRecord(label=label, path=str(path))
    try:
        source = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        record.status = DocumentStatus.unreadable
        record.error = str(e)
        return record

    tokens = tokenize(source)
    record.token_count = len(tokens)
    if len(tokens) < min_tokens:
        record.status = DocumentStatus.too_short
        record.error = f"{len(tokens)} tokens (minimum {min_tokens})"
        return record

    try:
        program = parse(tokens)
    except SourceSyntaxError as e:
        record.status = DocumentStatus.syntax_error
        record.error = str(e)
        return record
    except RecursionError:
        return _too_deep(record)

    try:
        record.fingerprints = collect_fingerprints(program)
    except RecursionError:
        return _too_deep(record)
    record.fingerprint_count = len(record.fingerprints)
    return record


def _too_deep(record: DocumentRecord) -> DocumentRecord:
    record.status = DocumentStatus.too_deep
    record.error = "nesting too deep to analyze"
    return record


def _analyze_task(task: Tuple[Path, str, int]) -> DocumentRecord:
    return analyze_document(*task)


def analyze_corpus(files: Sequence[Tuple[Path, str]], config: DetectorConfig) -> List[DocumentRecord]:
    """Analyze every file, in parallel when ``config.workers > 1``. Order is preserved."""
    tasks = [(path, label, config.min_tokens) for path, label in files]
    if config.workers > 1 and len(tasks) > 1:
        with concurrent.futures.ProcessPoolExecutor(max_workers=config.workers) as executor:
            documents = list(tqdm(executor.map(_analyze_task, tasks), total=len(tasks), desc="Analyzing"))
    else:
        documents = [_analyze_task(task) for task in tqdm(tasks, desc="Analyzing")]

    for doc in documents:
        if doc.comparable:
            logger.debug("%s: %d tokens, %d fingerprints", doc.label, doc.token_count, doc.fingerprint_count)
        else:
            logger.warning("Skipping %s (%s): %s", doc.label, doc.status.value, doc.error)
    return documents


# ---------------------------------------------------------------------------
# Pairwise comparison
# ---------------------------------------------------------------------------
def compare_pair(doc1: DocumentRecord, doc2: DocumentRecord, config: DetectorConfig) -> PairResult:
    score = jaccard_similarity(doc1.fingerprints, doc2.fingerprints)
    return PairResult(
        document1=doc1.label,
        document2=doc2.label,
        similarity=score,
        shared_fingerprints=len(doc1.fingerprints & doc2.fingerprints),
        union_fingerprints=len(doc1.fingerprints | doc2.fingerprints),
        flagged=is_flagged(score, config.threshold),
        verdict=classify(score, config.threshold, config.review_margin),
    )


def compare_corpus(documents: Sequence[DocumentRecord], config: DetectorConfig) -> List[PairResult]:
    """Score every unordered pair of comparable documents, highest first."""
    comparable = [doc for doc in documents if doc.comparable]
    pairs: List[PairResult] = []
    total_pairs = len(comparable) * (len(comparable) - 1) // 2
    with tqdm(total=total_pairs, desc="Comparing") as pbar:
        for i, doc1 in enumerate(comparable):
            for doc2 in comparable[i + 1:]:
                result = compare_pair(doc1, doc2, config)
                if result.flagged:
                    logger.debug("%s <-> %s: %s (%.2f)", doc1.label, doc2.label,
                                 result.verdict.value, result.similarity)
                pairs.append(result)
                pbar.update(1)

    pairs.sort(key=lambda p: (-p.similarity, p.document1, p.document2))
    return pairs


def build_report(
    documents: Sequence[DocumentRecord],
    pairs: Sequence[PairResult],
    config: DetectorConfig,
) -> PlagiarismReport:
    counts: Dict[Verdict, int] = {verdict: 0 for verdict in Verdict}
    for pair in pairs:
        counts[pair.verdict] += 1
    analyzed = sum(1 for doc in documents if doc.comparable)

    summary = ReportSummary(
        documents_analyzed=analyzed,
        documents_skipped=len(documents) - analyzed,
        pairs_analyzed=len(pairs),
        high_plagiarism=counts[Verdict.HIGH_PLAGIARISM],
        suspicious=counts[Verdict.SUSPICIOUS],
        needs_review=counts[Verdict.NEEDS_REVIEW],
        likely_clean=counts[Verdict.likely_clean],
        threshold=config.threshold,
    )
    return PlagiarismReport(
        summary=summary,
        documents=list(documents),
        flagged_pairs=[p for p in pairs if p.flagged],
        pairs=list(pairs),
    )


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------
def write_plagiarism_report(output_path: Path, report: PlagiarismReport) -> None:
    """Write the full report as JSON."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(report.model_dump(mode="json"), f, indent=2)


def write_plagiarism_csv(output_path: Path, pairs: Sequence[PairResult]) -> None:
    """Write one CSV row per scored pair."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for pair in pairs:
            writer.writerow(pair.model_dump(mode="json"))


def print_summary(report: PlagiarismReport) -> None:
    summary = report.summary
    print("\n" + "=" * 70)
    print("PLAGIARISM DETECTION SUMMARY")
    print("=" * 70)
    print(f"Documents analyzed: {summary.documents_analyzed} "
          f"(skipped: {summary.documents_skipped}), pairs: {summary.pairs_analyzed}, "
          f"threshold: {summary.threshold:g}")

    by_verdict: Dict[Verdict, List[PairResult]] = {verdict: [] for verdict in Verdict}
    for pair in report.pairs:
        by_verdict[pair.verdict].append(pair)

    print(f"\n🚨 HIGH PLAGIARISM: {len(by_verdict[Verdict.HIGH_PLAGIARISM])} pairs")
    for pair in by_verdict[Verdict.HIGH_PLAGIARISM]:
        print(f"   • {pair.document1} <-> {pair.document2} (score: {pair.similarity:.2f})")

    print(f"\n⚠️  SUSPICIOUS: {len(by_verdict[Verdict.SUSPICIOUS])} pairs")
    for pair in by_verdict[Verdict.SUSPICIOUS]:
        print(f"   • {pair.document1} <-> {pair.document2} (score: {pair.similarity:.2f})")

    print(f"\n📋 NEEDS REVIEW: {len(by_verdict[Verdict.NEEDS_REVIEW])} pairs")
    for pair in by_verdict[Verdict.NEEDS_REVIEW][:10]:
        print(f"   • {pair.document1} <-> {pair.document2} (score: {pair.similarity:.2f})")

    if not report.flagged_pairs:
        print("\n✅ No significant plagiarism detected!")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
def load_config(args: argparse.Namespace) -> DetectorConfig:
    """Defaults, then the ``--config`` JSON file, then explicit CLI flags."""
    try:
        if args.config:
            config = DetectorConfig.model_validate_json(Path(args.config).read_text(encoding="utf-8"))
        else:
            config = DetectorConfig()

        overrides = {
            "threshold": args.threshold,
            "extensions": args.extensions,
            "workers": args.workers,
            "min_tokens": args.min_tokens,
        }
        overrides = {key: value for key, value in overrides.items() if value is not None}
        if overrides:
            config = DetectorConfig.model_validate({**config.model_dump(), **overrides})
    except OSError as e:
        raise SystemExit(f"Cannot read config file {args.config}: {e}")
    except ValidationError as e:
        raise SystemExit(f"Invalid configuration:\n{e}")
    return config


def dump_ast(path: Path) -> str:
    """Indented tree of one file, for debugging the parser."""
    return format_tree(parse(tokenize(path.read_text(encoding="utf-8", errors="replace"))))


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Detect structural plagiarism between C/C++ source files")
    parser.add_argument("root", nargs="?", help="Directory to scan recursively, or a single file")
    parser.add_argument("--extensions", nargs="+", help="File extensions to include (default: C/C++ sources)")
    parser.add_argument("--threshold", type=float, help="Flag pairs at or above this similarity (0-100)")
    parser.add_argument("--output", default="results/plagiarism_report.json", help="JSON report output")
    parser.add_argument("--csv-output", default="results/plagiarism_scores.csv", help="CSV summary output")
    parser.add_argument("--html-output", help="Optional HTML report output")
    parser.add_argument("--heatmap-output", help="Optional similarity heatmap (PNG) output")
    parser.add_argument("--config", help="JSON file with detector settings")
    parser.add_argument("--workers", type=int, help="Parallel analysis processes")
    parser.add_argument("--min-tokens", type=int, help="Skip documents with fewer tokens")
    parser.add_argument("--dump-ast", metavar="FILE", help="Print the syntax tree of FILE and exit")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.dump_ast:
        try:
            print(dump_ast(Path(args.dump_ast)), end="")
        except OSError as e:
            raise SystemExit(f"Cannot read {args.dump_ast}: {e}")
        except SourceSyntaxError as e:
            raise SystemExit(f"{args.dump_ast}: {e}")
        except RecursionError:
            raise SystemExit(f"{args.dump_ast}: nesting too deep to analyze")
        return

    if not args.root:
        parser.error("ROOT is required unless --dump-ast is given")
    root_dir = Path(args.root)
    if not root_dir.exists():
        raise SystemExit(f"Root path not found: {root_dir}")

    config = load_config(args)

    files = gather_source_files(root_dir, config)
    if not files:
        raise SystemExit(f"No source files matching {', '.join(config.extensions)} under {root_dir}")
    logger.info("Found %d source files", len(files))

    documents = analyze_corpus(files, config)
    pairs = compare_corpus(documents, config)
    report = build_report(documents, pairs, config)

    output_path = Path(args.output)
    write_plagiarism_report(output_path, report)
    logger.info("Wrote detailed report to %s", output_path)

    csv_path = Path(args.csv_output)
    write_plagiarism_csv(csv_path, pairs)
    logger.info("Wrote CSV summary to %s", csv_path)

    if args.html_output:
        generate_html_report(output_path, Path(args.html_output))
    if args.heatmap_output:
        if pairs:
            plot_heatmap(load_similarity_matrix(csv_path), Path(args.heatmap_output))
        else:
            logger.warning("No pairs to plot; heatmap skipped")

    print_summary(report)


if __name__ == "__main__":
    main()
