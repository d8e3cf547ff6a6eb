from .analysis import AggregateResult, AggregateSummary, ExpertAnalysisResult, ExpertRole
from .detail import DogDetail, FinancialSummary, PregnancyDetail, VaccinationStatus
from .records import Animal, Expense, HealthEvent, LitterEvent, Purchase, Sale
from .report import AnalysisReport, AnalysisReportSummary

__all__ = [
    "Animal", "Purchase", "Sale", "Expense", "HealthEvent", "LitterEvent",
    "DogDetail", "FinancialSummary", "PregnancyDetail", "VaccinationStatus",
    "AggregateResult", "AggregateSummary", "ExpertAnalysisResult", "ExpertRole",
    "AnalysisReport", "AnalysisReportSummary",
]
