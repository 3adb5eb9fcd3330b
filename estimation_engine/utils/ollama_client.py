import httpx
from typing import Optional
from estimation_engine.components.base.config import get_settings
from estimation_engine.components.base.exceptions import OllamaUnavailableError, OllamaTimeoutError
from estimation_engine.components.base.logging import get_logger
from .scoring_client import GenerationOptions

_client: Optional["OllamaClient"] = None

logger = get_logger(__name__)


class OllamaClient:
    """Async Ollama generation client implementing TextScoringClient."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = base_url or settings.ollama_base_url
        self.gen_model = model or settings.ollama_gen_model
        self.timeout = timeout or settings.ollama_timeout_seconds
        self._transport = transport

    def _http_client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        """Generate text for a prompt and return the raw response body text."""
        options = options or GenerationOptions()
        payload = {
            "model": self.gen_model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": options.temperature,
                "num_predict": options.max_tokens,
            },
        }
        if options.system_prompt:
            payload["system"] = options.system_prompt
        if options.format == "json":
            payload["format"] = "json"

        try:
            async with self._http_client(self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/api/generate", json=payload
                )
                response.raise_for_status()
                return response.json().get("response", "")
        except httpx.TimeoutException:
            raise OllamaTimeoutError(
                f"Ollama request timed out after {self.timeout}s", component="ollama"
            )
        except httpx.HTTPError as e:
            raise OllamaUnavailableError(f"Ollama unavailable: {e}", component="ollama")

    async def verify_connection(self) -> bool:
        """Verify Ollama is accessible."""
        try:
            async with self._http_client(5) as client:
                response = await client.get(f"{self.base_url}/api/tags")
                return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("ollama_unreachable", base_url=self.base_url, error=str(e))
            return False


def get_ollama_client() -> OllamaClient:
    """Get singleton OllamaClient instance."""
    global _client
    if _client is None:
        _client = OllamaClient()
    return _client
