"""OpenAI Images API client for dish photo generation and editing."""

import base64
from dataclasses import dataclass

import httpx
from openai import APIConnectionError, AsyncOpenAI

from culinary_lens.services.generation import ImageGenerationClient


@dataclass
class OpenAIImageClient(ImageGenerationClient):
    """Image client backed by OpenAI Images API."""

    client: AsyncOpenAI
    model: str
    size: str = "1024x1024"

    @classmethod
    def create(
        cls,
        api_key: str,
        model: str,
        size: str = "1024x1024",
        http_client: httpx.AsyncClient | None = None,
    ) -> "OpenAIImageClient":
        """Create an OpenAI image client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, http_client=http_client),
            model=model,
            size=size,
        )

    async def generate(self, prompt: str) -> str:
        """Generate an image and return its base64 payload."""
        try:
            response = await self.client.images.generate(
                model=self.model,
                prompt=prompt,
                size=self.size,
                n=1,
                **self._format_options(),
            )
        except APIConnectionError as exc:
            raise RuntimeError(f"Network error while generating image: {exc}") from exc
        return _first_image(response, "No image generated")

    async def edit(self, image_base64: str, instruction: str) -> str:
        """Edit a base64 image with an instruction and return the new payload."""
        image_bytes = base64.b64decode(image_base64)
        try:
            response = await self.client.images.edit(
                model=self.model,
                image=("dish.png", image_bytes, "image/png"),
                prompt=instruction,
                size=self.size,
                **self._format_options(),
            )
        except APIConnectionError as exc:
            raise RuntimeError(f"Network error while editing image: {exc}") from exc
        return _first_image(response, "Failed to edit image")

    def _format_options(self) -> dict[str, str]:
        """DALL-E models return URLs unless base64 output is requested."""
        if self.model.startswith("dall-e"):
            return {"response_format": "b64_json"}
        return {}


def _first_image(response: object, empty_message: str) -> str:
    """Return the first base64 image in an Images API response."""
    for item in getattr(response, "data", None) or []:
        encoded = getattr(item, "b64_json", None)
        if encoded:
            return encoded
    raise RuntimeError(empty_message)
