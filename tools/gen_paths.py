"""
gen_paths.py - Output roots shared by the asset compilers.
"""

GEN_ROOT = "gen"
ANALYSIS_ROOT = "gen/analysis"

CHR_DIR = "chr"
STAGE_DIR = "stages"
INCLUDE_DIR = "include"
