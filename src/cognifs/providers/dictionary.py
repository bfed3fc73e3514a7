"""Dictionary-based tagging: fast, local, deterministic."""

import re
from collections import Counter
from pathlib import Path
from typing import Dict, Mapping, Optional

from cognifs.constants import KEYWORD_TAGS
from cognifs.file_utils import get_extension
from cognifs.providers.base import TagProvider
from cognifs.utils import extension_category, extract_tags_from_path

# Weight of one keyword hit in the file name versus one in the content
NAME_KEYWORD_WEIGHT = 2.0
CONTENT_KEYWORD_WEIGHT = 1.0
CATEGORY_WEIGHT = 1.0
PATH_WORD_WEIGHT = 0.5

WORD_RE = re.compile(r"[a-z0-9]+")


def _path_weights(path: Path, keywords: Mapping[str, str]) -> Counter:
    weights: Counter = Counter()
    for word in extract_tags_from_path(path, depth=1):
        if word in keywords:
            weights[keywords[word]] += NAME_KEYWORD_WEIGHT
        else:
            weights[word] += PATH_WORD_WEIGHT

    category = extension_category(get_extension(path))
    if category:
        weights[category] += CATEGORY_WEIGHT
    return weights


def path_tags(path: Path, keywords: Mapping[str, str] = KEYWORD_TAGS) -> Dict[str, float]:
    """
    Weighted tags from the file name, its parent directory and its extension.

    Used on its own as the degraded tag set when a provider fails. Never empty.
    """
    return dict(_path_weights(path, keywords)) or {"unknown": CATEGORY_WEIGHT}


class DictionaryTagProvider(TagProvider):
    """
    Tags files by keyword frequency.

    Each occurrence of a known keyword in the content counts towards the mapped
    tag; keywords in the file name count double. Path words and the extension
    category add a small baseline so files without text still get tags.
    """

    name = "dictionary"

    def __init__(self, keywords: Optional[Mapping[str, str]] = None):
        self.keywords = dict(keywords or KEYWORD_TAGS)

    async def tag(self, path: Path, content: str) -> Dict[str, float]:
        weights = _path_weights(path, self.keywords)

        for word in WORD_RE.findall(content.lower()):
            tag = self.keywords.get(word)
            if tag:
                weights[tag] += CONTENT_KEYWORD_WEIGHT

        if not weights:
            return {"text" if content.strip() else "unknown": CATEGORY_WEIGHT}
        return dict(weights)
