"""Defaults and environment key names."""

DEFAULT_DIMENSION = 1536
DEFAULT_MAX_VECTORS = 10_000

DEFAULT_KNOWLEDGE_COLLECTION = "knowledge_memory"
DEFAULT_WORKSPACE_COLLECTION = "workspace_memory"
DEFAULT_WORKSPACE_NAMESPACE = "workspace"

# Engine ports applied by adapters when only a host is configured
DEFAULT_QDRANT_PORT = 6333
DEFAULT_MILVUS_PORT = 19530
DEFAULT_CHROMA_PORT = 8000

# Collection name alphabet (checked after trimming)
COLLECTION_NAME_PATTERN = r"^[A-Za-z0-9_-]+$"

# Environment keys. Field keys are read as <prefix><FIELD>.
DEFAULT_PREFIX = "VECTOR_STORE_"
WORKSPACE_PREFIX = "WORKSPACE_VECTOR_STORE_"

FIELD_TYPE = "TYPE"
FIELD_HOST = "HOST"
FIELD_PORT = "PORT"
FIELD_URL = "URL"
FIELD_API_KEY = "API_KEY"
FIELD_COLLECTION = "COLLECTION"
FIELD_DIMENSION = "DIMENSION"
FIELD_DISTANCE = "DISTANCE"
FIELD_ON_DISK = "ON_DISK"
FIELD_MAX_VECTORS = "MAX_VECTORS"
FIELD_USERNAME = "USERNAME"
FIELD_PASSWORD = "PASSWORD"

VECTOR_STORE_FIELDS = (
    FIELD_TYPE,
    FIELD_HOST,
    FIELD_PORT,
    FIELD_URL,
    FIELD_API_KEY,
    FIELD_COLLECTION,
    FIELD_DIMENSION,
    FIELD_DISTANCE,
    FIELD_ON_DISK,
    FIELD_MAX_VECTORS,
    FIELD_USERNAME,
    FIELD_PASSWORD,
)

PINECONE_NAMESPACE = "PINECONE_NAMESPACE"
PINECONE_METRIC = "PINECONE_METRIC"
REFLECTION_COLLECTION = "REFLECTION_VECTOR_STORE_COLLECTION"
USE_WORKSPACE_MEMORY = "USE_WORKSPACE_MEMORY"
