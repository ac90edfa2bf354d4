from . import name_mapper
from .espn_import import EspnImportService, ImportResult, WeekImportData

__all__ = ["name_mapper", "EspnImportService", "ImportResult", "WeekImportData"]
