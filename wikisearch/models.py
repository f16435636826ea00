"""Data model for the hybrid retrieval engine.

Indexed records and ranked results are plain dataclasses; caller-supplied
query options are pydantic models so bad input is rejected at the boundary.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SearchType(str, Enum):
    """Which ranking produced a result."""
    LEXICAL = "lexical"
    SEMANTIC = "semantic"
    HYBRID = "hybrid"


class FilterOperator(str, Enum):
    """Comparison operators accepted by ``SearchFilter``."""
    EQ = "eq"
    NE = "ne"
    IN = "in"
    NIN = "nin"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"
    CONTAINS = "contains"


@dataclass
class DocumentMetadata:
    """Descriptive fields of a wiki page section."""
    page_id: str
    title: str
    category: str
    tags: List[str] = field(default_factory=list)
    word_count: int = 0
    section: Optional[str] = None
    file_path: Optional[str] = None
    language: Optional[str] = None


@dataclass
class Document:
    """A unit of indexed text. ``id`` is unique per engine."""
    id: str
    content: str
    metadata: DocumentMetadata


@dataclass(frozen=True)
class HighlightSpan:
    """Character offsets of a matched term within the document content."""
    start: int
    end: int


@dataclass
class SearchHighlight:
    field: str
    snippet: str
    positions: List[HighlightSpan] = field(default_factory=list)


@dataclass
class SearchResult:
    """A ranked document.

    ``score_details`` carries the per-index components of a fused score
    (``lexical_score``, ``semantic_score``) and the query terms that matched.
    """
    document: Document
    score: float
    search_type: SearchType
    highlights: Optional[List[SearchHighlight]] = None
    score_details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to a JSON-serializable dictionary."""
        data = asdict(self)
        data["search_type"] = self.search_type.value
        return data


@dataclass
class LexicalMatch:
    document_id: str
    score: float
    matched_terms: List[str] = field(default_factory=list)


@dataclass
class VectorMatch:
    document_id: str
    score: float


class SearchFilter(BaseModel):
    """Predicate on a document field or a ``metadata.*`` dotted path."""
    field: str = Field(..., description="Document field or dotted metadata path")
    operator: FilterOperator = Field(..., description="Comparison operator")
    value: Any = Field(None, description="Value compared against the field")


class SearchOptions(BaseModel):
    """Options accepted by ``HybridSearchEngine.search``.

    camelCase keys (``maxResults``, ``keywordWeight``) are accepted so option
    dictionaries forwarded by the wiki CLI validate unchanged.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    max_results: int = Field(10, ge=1, description="Maximum number of results")
    threshold: float = Field(0.0, description="Minimum fused score; ignored when <= 0")
    include_highlights: bool = Field(False, description="Attach content highlights")
    keyword_weight: float = Field(0.5, description="Weight of the TF-IDF score")
    semantic_weight: float = Field(0.5, description="Weight of the cosine score")
    filters: List[SearchFilter] = Field(default_factory=list, description="Result filters")
