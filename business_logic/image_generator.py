"""
Key-art image generation.
"""

import logging
from typing import Callable, Optional

from openai import OpenAI

from .ai_client import get_client
from .error_handler import (
    AuthMissing, CredentialUpdated, GenerationFailed, NoImageProduced, is_auth_error
)
from .key_resolver import KeyResolver, CredentialSelector, require_credential

logger = logging.getLogger(__name__)

# High-capability image model regardless of the report tier
IMAGE_MODEL = "dall-e-3"
# Widest landscape size the model accepts (16:9 class)
IMAGE_SIZE = "1792x1024"
IMAGE_QUALITY = "hd"
DEFAULT_MIME_TYPE = "image/png"


class ImageGenerator:
    """Renders a key-art prompt into an image data URI."""

    def __init__(self, key_resolver: Optional[KeyResolver] = None,
                 credential_selector: Optional[CredentialSelector] = None,
                 client_factory: Callable[[str], OpenAI] = get_client):
        self.key_resolver = key_resolver or KeyResolver.from_config()
        self.credential_selector = credential_selector
        self.client_factory = client_factory

    def generate_image(self, prompt: str) -> str:
        """
        Generate one landscape image for ``prompt``.

        Args:
            prompt: Image generation prompt from a key-art concept

        Returns:
            ``data:<mime>;base64,<payload>`` URI

        Raises:
            AuthMissing: If no credential resolves
            NoImageProduced: If the response carries no image payload
        """
        api_key = require_credential(self.key_resolver, self.credential_selector)
        client = self.client_factory(api_key)

        try:
            response = client.images.generate(
                model=IMAGE_MODEL,
                prompt=prompt,
                size=IMAGE_SIZE,
                quality=IMAGE_QUALITY,
                response_format="b64_json",
                n=1,
            )
        except Exception as e:
            if is_auth_error(e):
                if self.credential_selector is None:
                    raise AuthMissing(f"API key was rejected: {str(e)}") from e
                self.credential_selector.open_select_key()
                raise CredentialUpdated() from e
            logger.error(f"Image generation failed: {str(e)}")
            raise GenerationFailed(f"Image generation failed: {str(e)}") from e

        output_format = getattr(response, "output_format", None)
        mime_type = f"image/{output_format}" if output_format else DEFAULT_MIME_TYPE

        for image in getattr(response, "data", None) or []:
            payload = getattr(image, "b64_json", None)
            if payload:
                return f"data:{mime_type};base64,{payload}"

        raise NoImageProduced()
