from .scoring_client import GenerationOptions, TextScoringClient
from .ollama_client import OllamaClient, get_ollama_client
from .ledger import HistoricalLedger

__all__ = [
    "GenerationOptions",
    "TextScoringClient",
    "OllamaClient",
    "get_ollama_client",
    "HistoricalLedger",
]
