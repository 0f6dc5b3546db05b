"""Embedding service for generating vector embeddings."""

from typing import Optional

import openai
from loguru import logger
from tenacity import retry, stop_after_attempt, wait_exponential

from app.core.exceptions import EmbeddingError
from app.core.similarity import cosine_similarity
from app.services.cache_service import EmbeddingCache


class EmbeddingService:
    """Service for generating fixed-size embeddings using OpenAI."""

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        dimensions: int = 384,
        cache: Optional[EmbeddingCache] = None,
    ) -> None:
        """Initialize embedding service."""
        self.client = openai.AsyncOpenAI(api_key=api_key)
        self.model = model
        self.dimensions = dimensions
        self.cache = cache
        logger.info(f"Initialized EmbeddingService with model: {model} ({dimensions} dims)")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _create_embeddings(self, texts: list[str]) -> list[list[float]]:
        response = await self.client.embeddings.create(
            model=self.model,
            input=texts,
            dimensions=self.dimensions,
        )
        return [item.embedding for item in response.data]

    def _check_dimensions(self, embedding: list[float]) -> list[float]:
        if len(embedding) != self.dimensions:
            raise EmbeddingError(
                f"Embedding has {len(embedding)} dimensions, expected {self.dimensions}"
            )
        return embedding

    async def generate_embedding(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        if self.cache:
            cached = await self.cache.get_embedding(self.model, text)
            if cached is not None and len(cached) == self.dimensions:
                logger.debug(f"Embedding cache hit for text of length {len(text)}")
                return cached
            if cached is not None:
                logger.warning(
                    f"Evicting cached embedding with {len(cached)} dimensions, "
                    f"expected {self.dimensions}"
                )
                await self.cache.evict_embedding(self.model, text)

        try:
            embedding = (await self._create_embeddings([text]))[0]
        except Exception as e:
            logger.error(f"Error generating embedding: {e}")
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        embedding = self._check_dimensions(embedding)
        logger.debug(f"Generated embedding for text of length {len(text)}")
        if self.cache:
            await self.cache.set_embedding(self.model, text, embedding)
        return embedding

    async def generate_embeddings(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts in batch."""
        if not texts:
            return []
        try:
            embeddings = await self._create_embeddings(texts)
        except Exception as e:
            logger.error(f"Error generating batch embeddings: {e}")
            raise EmbeddingError(f"Batch embedding request failed: {e}") from e

        embeddings = [self._check_dimensions(embedding) for embedding in embeddings]
        logger.info(f"Generated {len(embeddings)} embeddings")
        return embeddings

    async def compute_similarity(self, embedding1: list[float], embedding2: list[float]) -> float:
        """Compute cosine similarity between two embeddings."""
        return cosine_similarity(embedding1, embedding2)
