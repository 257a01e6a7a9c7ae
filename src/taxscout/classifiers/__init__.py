"""
Classifiers Package

Keyword heuristics for vacant land and lien hits.
"""
from src.taxscout.classifiers.lien_extractor import extract_liens
from src.taxscout.classifiers.vacancy import VacancyMatch, detect_vacancy, is_vacant

__all__ = ["extract_liens", "VacancyMatch", "detect_vacancy", "is_vacant"]
