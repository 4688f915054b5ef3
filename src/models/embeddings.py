"""
Query embeddings for the similarity backend.

The chunk collections were embedded offline; the model configured here must
be the same one, otherwise similarity scores are meaningless.
"""
import logging
from typing import List

from sentence_transformers import SentenceTransformer

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "paraphrase-multilingual-MiniLM-L12-v2"


class QueryEmbedder:
    """
    Embeds semantic queries with a sentence-transformers model.

    Vectors are L2-normalized to match the cosine space of the collections.
    """

    def __init__(self, model_name: str = DEFAULT_MODEL) -> None:
        self.model_name = model_name
        logger.info(f"Loading query embedding model '{model_name}'")
        self.model = SentenceTransformer(model_name)
        self.dimension = self.model.get_sentence_embedding_dimension()
        logger.info(f"Query embedding model ready ({self.dimension} dimensions)")

    def embed_query(self, query: str) -> List[float]:
        """
        Embed one semantic query.

        Args:
            query: Text to embed

        Returns:
            Normalized embedding vector

        Raises:
            ValueError: If the query is blank
        """
        if not query or not query.strip():
            raise ValueError("Cannot embed an empty query")

        vector = self.model.encode(query, normalize_embeddings=True)
        return [float(x) for x in vector]
