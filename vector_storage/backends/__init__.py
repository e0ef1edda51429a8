"""Storage engine adapters. Remote client libraries other than qdrant-client are optional extras."""
from vector_storage.backends.base import BaseVectorStore
from vector_storage.backends.chroma import ChromaVectorStore
from vector_storage.backends.in_memory import InMemoryVectorStore, VectorRecord
from vector_storage.backends.milvus import MilvusVectorStore
from vector_storage.backends.pinecone import PineconeVectorStore
from vector_storage.backends.qdrant import QdrantVectorStore, build_qdrant_client

__all__ = [
    "BaseVectorStore",
    "ChromaVectorStore",
    "InMemoryVectorStore",
    "MilvusVectorStore",
    "PineconeVectorStore",
    "QdrantVectorStore",
    "VectorRecord",
    "build_qdrant_client",
]
