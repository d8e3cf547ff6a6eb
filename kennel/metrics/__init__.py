from . import breeding, financial, health, temporal

__all__ = ["breeding", "financial", "health", "temporal"]
