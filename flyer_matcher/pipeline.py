"""
Run orchestration: flyer PDF + master list -> deduplicated official names.

Wires the boundary pieces (PDF/OCR line reader, master file loader,
exporter) around the matching core. Inputs are checked up front so a
missing file fails before any page is read.

Usage:
    from flyer_matcher.pipeline import run_file, export_run

    run = run_file("flyer.pdf", "master.csv")
    paths = export_run(run, "out/")
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from flyer_matcher.export.exporter import ResultExporter
from flyer_matcher.extraction.filters import NoiseFilter
from flyer_matcher.extraction.master_file import load_master_index
from flyer_matcher.extraction.pdf_reader import PdfLineReader, RawLine
from flyer_matcher.matching.extractor import Extractor
from flyer_matcher.matching.master_index import MasterIndex
from flyer_matcher.matching.match_result import ResultSet
from flyer_matcher.matching.types import MatcherConfig
from flyer_matcher.utils.config_manager import ConfigManager

logger = logging.getLogger(__name__)

OUTPUT_SUFFIXES = {
    'official': '_machines_official.csv',
    'detailed': '_machines_detailed.csv',
    'unmatched': '_unmatched.csv',
    'workbook': '_machines.xlsx',
}


@dataclass
class ExtractionRun:
    """Everything one extraction run produced."""
    result_set: ResultSet
    index: MasterIndex
    lines: List[Union[str, RawLine]] = field(default_factory=list)
    source: Optional[Path] = None
    config: Optional[MatcherConfig] = None

    @property
    def stem(self) -> str:
        """Base name for output files."""
        return self.source.stem if self.source else 'flyer'


def check_inputs(pdf_path: Union[str, Path],
                 master_path: Union[str, Path]) -> Tuple[Path, Path]:
    """
    Verify that both input files exist.

    Raises:
        FileNotFoundError: If either file is missing
    """
    pdf_path, master_path = Path(pdf_path), Path(master_path)
    if not master_path.exists():
        raise FileNotFoundError(f"Master file not found: {master_path}")
    if not pdf_path.exists():
        raise FileNotFoundError(f"PDF not found: {pdf_path}")
    return pdf_path, master_path


def run_extraction(provider, index: MasterIndex,
                   matcher_config: Optional[MatcherConfig] = None,
                   noise_filter: Optional[NoiseFilter] = None,
                   source: Optional[Path] = None) -> ExtractionRun:
    """
    Match the lines of any LineProvider against a loaded index.

    Args:
        provider: Object with ``provide_lines()``
        index: Loaded master index
        matcher_config: Tier configuration (default preset if None)
        noise_filter: NoiseFilter (default denylist if None)
        source: Source file, recorded for output naming

    Returns:
        ExtractionRun
    """
    lines = list(provider.provide_lines())
    extractor = Extractor(index=index, config=matcher_config, noise_filter=noise_filter)
    result_set = extractor.extract(lines)
    return ExtractionRun(
        result_set=result_set,
        index=index,
        lines=lines,
        source=source,
        config=extractor.config,
    )


def run_file(pdf_path: Union[str, Path], master_path: Union[str, Path],
             config: Optional[ConfigManager] = None, preset: Optional[str] = None,
             show_progress: bool = False) -> ExtractionRun:
    """
    Full run over a PDF flyer and a master file.

    Args:
        pdf_path: Flyer PDF
        master_path: Master list (CSV / TSV / text / Excel)
        config: ConfigManager (defaults if None)
        preset: Matcher preset overriding the configured one
        show_progress: tqdm progress bar over pages

    Returns:
        ExtractionRun

    Raises:
        FileNotFoundError: If an input file is missing
    """
    pdf_path, master_path = check_inputs(pdf_path, master_path)
    config = config or ConfigManager()

    index = load_master_index(master_path)
    reader = PdfLineReader(
        pdf_path,
        ocr_fallback=config.get_extraction_param('ocr_fallback'),
        min_page_chars=config.get_extraction_param('min_page_chars'),
        ocr_lang=config.get_extraction_param('ocr_lang'),
        ocr_zoom=config.get_extraction_param('ocr_zoom'),
        show_progress=show_progress,
    )
    return run_extraction(
        reader,
        index,
        matcher_config=config.matcher_config(preset),
        noise_filter=config.noise_filter(),
        source=pdf_path,
    )


def output_paths(out_dir: Union[str, Path], stem: str) -> Dict[str, Path]:
    """Output file path per kind ('official', 'detailed', 'unmatched', 'workbook')."""
    out_dir = Path(out_dir)
    return {kind: out_dir / f"{stem}{suffix}" for kind, suffix in OUTPUT_SUFFIXES.items()}


def export_run(run: ExtractionRun, out_dir: Union[str, Path],
               config: Optional[ConfigManager] = None,
               workbook: Optional[bool] = None,
               unmatched: bool = True) -> Dict[str, Path]:
    """
    Write the output files of a run.

    Args:
        run: Finished extraction run
        out_dir: Output directory (created if needed)
        config: ConfigManager for export settings (defaults if None)
        workbook: Also write the .xlsx workbook (config value if None)
        unmatched: Write the unmatched dump

    Returns:
        Mapping of output kind to written path
    """
    config = config or ConfigManager()
    exporter = ResultExporter(
        source_cut=config.get_export_param('source_cut'),
        bom=config.get_export_param('bom'),
        include_unmatched=config.get_export_param('include_unmatched'),
        include_provenance=config.get_export_param('include_provenance'),
    )
    if workbook is None:
        workbook = config.get_export_param('workbook')

    paths = output_paths(out_dir, run.stem)
    written = {
        'official': exporter.write_csv(exporter.official_table(run.result_set), paths['official']),
        'detailed': exporter.write_csv(exporter.detailed_table(run.result_set), paths['detailed']),
    }
    if unmatched:
        written['unmatched'] = exporter.write_csv(
            exporter.unmatched_table(run.result_set), paths['unmatched']
        )
    if workbook:
        written['workbook'] = exporter.write_workbook(run.result_set, paths['workbook'])

    logger.info("Exported %d official names to %s", len(run.result_set), Path(out_dir))
    return written
