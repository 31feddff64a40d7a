#!/usr/bin/env python3
"""Ground LLM key-term claims against a contract's extracted text."""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from keyterms.core.extraction_spec import DEFAULT_SPEC_PATH, load_extraction_spec
from keyterms.grounding import ground_claims
from keyterms.grounding.models import Document
from keyterms.ingest.decode import decode_claims

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("ground_claims")


# ── Runner ───────────────────────────────────────────────────────────


def run(
    text_path: str,
    claims_path: str,
    spec_path: str,
    output_path: str | None = None,
    form_feed_pages: bool = False,
) -> dict:
    """Ground one document's claims and return the JSON-ready result."""
    t_start = time.time()

    spec = load_extraction_spec(spec_path)
    logger.info("Extraction spec: %s (v%s, %d fields)", spec.title, spec.version, len(spec.fields))

    text = Path(text_path).read_text()
    document = Document.from_form_feeds(text) if form_feed_pages else Document.single_page(text)
    logger.info("Document: %d chars, %d page(s)", len(text), document.page_count)

    raw = json.loads(Path(claims_path).read_text())
    payloads = raw["chunks"] if isinstance(raw, dict) and "chunks" in raw else [raw]
    claim_sets = [decode_claims(p, fields=spec.field_names()) for p in payloads]
    logger.info("Decoded %d claim set(s)", len(claim_sets))

    result = ground_claims(claim_sets, document, spec)
    output = {
        "fields_hash": spec.fields_hash(),
        "page_count": document.page_count,
        "merged": result.merged,
        "extractions": [e.model_dump() for e in result.extractions],
        "report": result.report.model_dump(),
    }

    blob = json.dumps(output, indent=2)
    if output_path:
        Path(output_path).write_text(blob)
        logger.info("Verified extractions written to %s", output_path)
    else:
        print(blob)

    logger.info("Grounding complete in %.2fs", time.time() - t_start)
    return output


# ── CLI ──────────────────────────────────────────────────────────────


def main():
    parser = argparse.ArgumentParser(description="Verify LLM-claimed contract quotes")
    parser.add_argument("--text", required=True, help="Path to the document's extracted text")
    parser.add_argument(
        "--claims",
        required=True,
        help='Path to a model response JSON, or {"chunks": [...]} of per-chunk responses',
    )
    parser.add_argument("--spec", default=str(DEFAULT_SPEC_PATH), help="Extraction Spec YAML")
    parser.add_argument("--output", default=None, help="Write JSON here instead of stdout")
    parser.add_argument(
        "--form-feed-pages",
        action="store_true",
        help="Split pages at form-feed characters in the text",
    )
    args = parser.parse_args()

    try:
        run(args.text, args.claims, args.spec, args.output, args.form_feed_pages)
    except (OSError, ValueError) as exc:
        # ClaimDecodeError, JSONDecodeError and pydantic errors are ValueErrors
        logger.error("Grounding failed: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
