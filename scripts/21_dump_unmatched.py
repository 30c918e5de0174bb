"""
Script 21: Dump Unmatched Flyer Lines

Runs the matcher over a flyer PDF or a plain-text line dump and writes
only the lines that survived noise filtering without resolving to an
official name. Used to grow the master list and the alias columns.

Usage:
    python scripts/21_dump_unmatched.py --pdf flyer.pdf --master master.csv
    python scripts/21_dump_unmatched.py --lines dump.txt --master master.csv --output unmatched.csv
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from flyer_matcher.export.exporter import ResultExporter
from flyer_matcher.extraction.master_file import load_master_index
from flyer_matcher.extraction.pdf_reader import StaticLineProvider, load_text_lines
from flyer_matcher.pipeline import output_paths, run_extraction, run_file
from flyer_matcher.utils.config_manager import ConfigManager

LOG_DIR = PROJECT_ROOT / "logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "matcher_config.yaml"

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(LOG_DIR / 'dump_unmatched.log', encoding='utf-8'),
        logging.StreamHandler(sys.stdout),
    ],
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Dump flyer lines with no official match")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--pdf', help='Flyer PDF path')
    source.add_argument('--lines', help='Plain-text file, one candidate per line')
    parser.add_argument('--master', required=True, help='Master list file')
    parser.add_argument('--output', help='Output CSV (default: <stem>_unmatched.csv beside the input)')
    parser.add_argument('--config', default=str(DEFAULT_CONFIG_PATH), help='YAML configuration file')
    parser.add_argument('--preset', help='Matcher preset (overrides config)')

    args = parser.parse_args()
    config = ConfigManager(Path(args.config))

    try:
        if args.pdf:
            run = run_file(args.pdf, args.master, config=config, preset=args.preset)
        else:
            lines_path = Path(args.lines)
            index = load_master_index(args.master)
            run = run_extraction(
                StaticLineProvider(load_text_lines(lines_path)),
                index,
                matcher_config=config.matcher_config(args.preset),
                noise_filter=config.noise_filter(),
                source=lines_path,
            )
    except (FileNotFoundError, KeyError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)

    exporter = ResultExporter(bom=config.get_export_param('bom'))
    table = exporter.unmatched_table(run.result_set)
    output = Path(args.output) if args.output else output_paths(run.source.parent, run.stem)['unmatched']
    exporter.write_csv(table, output)

    print(f"\n{len(table)} unmatched lines -> {output}")
    for text in table['source_text'].head(20):
        print(f"  {text}")
    if len(table) > 20:
        print(f"  ... {len(table) - 20} more")


if __name__ == "__main__":
    main()
