# screening/retrieval/embeddings.py

from typing import List

from langchain_core.embeddings import Embeddings

from screening.retrieval.index import PineconeClientHolder


class PineconeEmbeddings(Embeddings):
    """
    LangChain ``Embeddings`` backed by Pinecone hosted inference.

    Queries and passages are embedded with different input types, which the
    e5 family of models requires for asymmetric search.
    """

    def __init__(self, holder: PineconeClientHolder, model: str = "multilingual-e5-large"):
        self.holder = holder
        self.model = model

    def _embed(self, texts: List[str], input_type: str) -> List[List[float]]:
        if not texts:
            return []
        result = self.holder.client.inference.embed(
            model=self.model,
            inputs=list(texts),
            parameters={"input_type": input_type, "truncate": "END"},
        )
        return [list(item.values) for item in result.data]

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        return self._embed(texts, "passage")

    def embed_query(self, text: str) -> List[float]:
        return self._embed([text], "query")[0]
