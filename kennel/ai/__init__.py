from .client import LLMClient
from .orchestrator import ReportOrchestrator, analyze_business
from .prompts import build_role_prompt

__all__ = ["LLMClient", "ReportOrchestrator", "analyze_business", "build_role_prompt"]
