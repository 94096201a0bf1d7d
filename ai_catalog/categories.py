"""
Catalog categories and entry schemas.

Each category key selects both the dataset array an entry is stored in and
the fields that entry carries. The label table is matched exactly; there is
no default category.
"""

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Type, Union

from .content_extractor import ExtractedContent
from .errors import InvalidCategoryError


class CategoryKey(str, Enum):
    CONTENT = 'content'
    TOOLS = 'tools'
    PROMPTS = 'prompts'
    PEOPLE = 'people'


# Labels exactly as shown on the reply keyboard, in display order
CATEGORY_LABEL_KEYS = {
    '\U0001F4C4 Content': CategoryKey.CONTENT,
    '\U0001F6E0\ufe0f Tools': CategoryKey.TOOLS,
    '\U0001F4A1 Prompts': CategoryKey.PROMPTS,
    '\U0001F468\u200d\U0001F4BB People': CategoryKey.PEOPLE,
}

CATEGORY_LABELS = list(CATEGORY_LABEL_KEYS)

# Used in dataset change descriptions
SINGULAR_NAMES = {
    CategoryKey.CONTENT: 'content',
    CategoryKey.TOOLS: 'tool',
    CategoryKey.PROMPTS: 'prompt',
    CategoryKey.PEOPLE: 'person',
}


def resolve_category(label: str) -> CategoryKey:
    """
    Map a keyboard label to its category key.

    Raises:
        InvalidCategoryError: for any string that is not one of the labels
    """
    try:
        return CATEGORY_LABEL_KEYS[label]
    except (KeyError, TypeError):
        raise InvalidCategoryError(label) from None


def today_utc() -> str:
    return datetime.now(timezone.utc).date().isoformat()


@dataclass
class ContentEntry:
    author: str
    content: str
    category: str
    dateAdded: str
    link: str

    @classmethod
    def from_extracted(cls, extracted: ExtractedContent, link: str, date_added: str) -> 'ContentEntry':
        return cls(
            author=extracted.author or 'Unknown',
            content=extracted.description,
            category=extracted.category,
            dateAdded=date_added,
            link=link,
        )


@dataclass
class ToolEntry:
    name: str
    description: str
    category: str
    features: List[str]
    dateAdded: str
    link: str

    @classmethod
    def from_extracted(cls, extracted: ExtractedContent, link: str, date_added: str) -> 'ToolEntry':
        return cls(
            name=extracted.title,
            description=extracted.description,
            category=extracted.category,
            features=list(extracted.features or []),
            dateAdded=date_added,
            link=link,
        )


@dataclass
class PromptEntry:
    title: str
    prompt: str
    category: str
    source: str
    dateAdded: str
    link: str

    @classmethod
    def from_extracted(cls, extracted: ExtractedContent, link: str, date_added: str) -> 'PromptEntry':
        return cls(
            title=extracted.title,
            prompt=extracted.description,
            category=extracted.category,
            source=link,
            dateAdded=date_added,
            link=link,
        )


@dataclass
class PersonEntry:
    name: str
    description: str
    notableFor: str
    dateAdded: str
    link: str

    @classmethod
    def from_extracted(cls, extracted: ExtractedContent, link: str, date_added: str) -> 'PersonEntry':
        return cls(
            name=extracted.title,
            description=extracted.description,
            notableFor=extracted.category,
            dateAdded=date_added,
            link=link,
        )


CatalogEntry = Union[ContentEntry, ToolEntry, PromptEntry, PersonEntry]

ENTRY_TYPES: Dict[CategoryKey, Type] = {
    CategoryKey.CONTENT: ContentEntry,
    CategoryKey.TOOLS: ToolEntry,
    CategoryKey.PROMPTS: PromptEntry,
    CategoryKey.PEOPLE: PersonEntry,
}


def build_catalog_entry(
    extracted: ExtractedContent,
    category_key: CategoryKey,
    link: str,
    date_added: Optional[str] = None,
) -> CatalogEntry:
    """Build the entry for category_key from an extraction result."""
    entry_type = ENTRY_TYPES[CategoryKey(category_key)]
    return entry_type.from_extracted(extracted, link, date_added or today_utc())


def entry_to_dict(entry: CatalogEntry) -> dict:
    """Serialize an entry with its fields in dataset order."""
    return asdict(entry)
