"""
Script 20: Extract Machine Names from a Flyer PDF

Reads a pachinko parlor flyer (text layer, OCR fallback for scanned pages),
reconciles every candidate line against the official-name master and
writes the deduplicated official names.

Outputs (in --out-dir, named after the PDF):
    <stem>_machines_official.csv  - official_name only, unique, collated
    <stem>_machines_detailed.csv  - official_name, match_type, source_text, distance
    <stem>_unmatched.csv          - lines that resolved to no official name
    <stem>_machines.xlsx          - all three tables (--workbook)

Usage:
    python scripts/20_extract_flyer.py --pdf flyer.pdf --master master.csv
    python scripts/20_extract_flyer.py --pdf flyer.pdf --master master.xlsx --preset strict
    python scripts/20_extract_flyer.py --pdf flyer.pdf --master master.csv --resplit --workbook
"""

import argparse
import logging
import sys
from pathlib import Path

import yaml

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from flyer_matcher.matching.types import PRESETS
from flyer_matcher.pipeline import export_run, run_file
from flyer_matcher.utils.config_manager import ConfigManager

LOG_DIR = PROJECT_ROOT / "logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "matcher_config.yaml"
DEFAULT_OUT_DIR = PROJECT_ROOT / "reports" / "flyers"

logger = logging.getLogger("extract_flyer")


def main():
    parser = argparse.ArgumentParser(
        description="Extract official machine names from a flyer PDF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--pdf', required=True, help='Flyer PDF path')
    parser.add_argument('--master', required=True,
                        help='Master list (CSV / TSV / text / Excel); column 1 official name, '
                             'further columns aliases')
    parser.add_argument('--out-dir', default=str(DEFAULT_OUT_DIR),
                        help='Output directory (default: reports/flyers/)')
    parser.add_argument('--config', default=str(DEFAULT_CONFIG_PATH),
                        help='YAML configuration file')
    parser.add_argument('--preset', choices=sorted(PRESETS),
                        help='Matcher preset (overrides config)')
    parser.add_argument('--resplit', action='store_true',
                        help='Re-split unmatched lines on inline separators')
    parser.add_argument('--no-ocr', action='store_true',
                        help='Text layer only, never OCR')
    parser.add_argument('--workbook', action='store_true',
                        help='Also write an .xlsx workbook')
    parser.add_argument('--provenance', action='store_true',
                        help='Add page / extraction columns to the detailed table')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Per-line debug logging')

    args = parser.parse_args()

    # Setup logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(LOG_DIR / 'extract_flyer.log', encoding='utf-8'),
            logging.StreamHandler(sys.stdout),
        ],
    )

    try:
        config = ConfigManager(Path(args.config))
    except yaml.YAMLError as e:
        logger.error(f"Invalid configuration file {args.config}: {e}")
        sys.exit(1)

    if args.resplit:
        config.update_param('matching', 'resplit', True)
    if args.no_ocr:
        config.update_param('extraction', 'ocr_fallback', False)
    if args.provenance:
        config.update_param('export', 'include_provenance', True)

    errors = config.validate_config()
    if errors:
        for error in errors:
            logger.error(f"Config: {error}")
        sys.exit(1)

    try:
        run = run_file(args.pdf, args.master, config=config,
                       preset=args.preset, show_progress=True)
        written = export_run(run, args.out_dir, config=config,
                             workbook=args.workbook or None)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)

    result = run.result_set
    counts = result.counts_by_type()

    print(f"\n{'='*60}")
    print(f"EXTRACTION COMPLETE")
    print(f"{'='*60}")
    print(f"  Flyer:        {run.source}")
    print(f"  Master:       {len(run.index)} official names ({run.index.alias_count} aliases)")
    print(f"  Lines:        {result.lines_seen} read, {result.skipped} skipped as noise")
    print(f"  Machines:     {len(result)} "
          f"({counts['exact']} exact, {counts['partial']} partial, {counts['fuzzy']} fuzzy)")
    print(f"  Unmatched:    {counts['unmatched']}")
    for kind, path in written.items():
        print(f"  {kind.capitalize():<13} {path}")
    print(f"{'='*60}\n")


if __name__ == "__main__":
    main()
