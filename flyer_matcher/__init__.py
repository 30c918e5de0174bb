"""
Flyer Machine-Name Matcher - Source Package

Main modules:
- normalization: Display form and loose-key normalization
- matching: Master index, tiered matching and result assembly
- extraction: PDF text layer / OCR line providers, master file loading, noise filters
- export: Official-name and detailed table output (CSV / workbook)
- utils: Configuration management
- pipeline: End-to-end extraction run
"""

__version__ = "1.0.0"
