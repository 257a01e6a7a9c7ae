"""
Exporters Package
"""
from src.taxscout.exporters.csv_sink import read_csv_rows, write_csv

__all__ = ["read_csv_rows", "write_csv"]
