"""OpenAI Responses API client for menu extraction."""

import json
import logging
from dataclasses import dataclass

import httpx
from openai import AsyncOpenAI

from culinary_lens.services.intake import MenuExtractionClient

_logger = logging.getLogger(__name__)


@dataclass
class OpenAIMenuClient(MenuExtractionClient):
    """Menu extraction client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(
        cls, api_key: str, http_client: httpx.AsyncClient | None = None
    ) -> "OpenAIMenuClient":
        """Create an OpenAI menu extraction client."""
        return cls(client=AsyncOpenAI(api_key=api_key, http_client=http_client))

    async def extract(
        self, *, model: str, menu_text: str, schema: dict[str, object], prompt: str
    ) -> dict[str, object]:
        """Call OpenAI Responses API with structured outputs."""
        response = await self.client.responses.create(
            model=model,
            input=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "input_text",
                            "text": f"{prompt}\n\nMenu Text:\n{menu_text}",
                        },
                    ],
                }
            ],
            text={
                "format": {
                    "type": "json_schema",
                    "name": "menu_extract",
                    "strict": True,
                    "schema": schema,
                }
            },
            store=False,
        )
        output_text = response.output_text
        if not output_text:
            _logger.warning("OpenAI returned an empty menu extraction")
            return {}
        try:
            return json.loads(output_text)
        except json.JSONDecodeError:
            _logger.warning("OpenAI returned malformed menu JSON")
            return {}
