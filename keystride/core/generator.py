from __future__ import annotations

import random
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml

from keystride.core.models import TypingDuration

MIN_WORDS = 10


@dataclass(frozen=True)
class Language:
    key: str
    name: str
    words: List[str]


class LanguageRepository:
    """Word lists loaded from ``keystride/data/languages/*.yaml``."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or Path(__file__).resolve().parent.parent / "data" / "languages"
        self._languages = self._load_languages()

    def all(self) -> List[Language]:
        return list(self._languages.values())

    def keys(self) -> List[str]:
        return list(self._languages)

    def get(self, key: str) -> Language:
        return self._languages[key]

    def resolve(self, key: str) -> Language:
        """Return *key*, or the first language when it is unknown."""
        return self._languages.get(key) or next(iter(self._languages.values()))

    def next_language(self, current: str) -> str:
        keys = self.keys()
        if current not in keys:
            return keys[0]
        return keys[(keys.index(current) + 1) % len(keys)]

    def _load_languages(self) -> Dict[str, Language]:
        if not self._base_dir.exists():
            raise FileNotFoundError(f"Languages directory not found: {self._base_dir}")

        languages: Dict[str, Language] = {}
        for path in sorted(self._base_dir.glob("*.yaml")):
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
            if not raw or not isinstance(raw, dict):
                raise ValueError(f"{path.name}: expected YAML with 'title' and 'words'")
            title = raw.get("title")
            words = raw.get("words")
            if not title or not isinstance(title, str):
                raise ValueError(f"{path.name}: missing or invalid 'title'")
            if words is None:
                raise ValueError(f"{path.name}: missing 'words'")
            if isinstance(words, list):
                cleaned = [str(w).strip() for w in words if str(w).strip()]
            else:
                cleaned = str(words).split()
            if not cleaned:
                raise ValueError(f"{path.name}: 'words' is empty")
            languages[path.stem] = Language(key=path.stem, name=title.strip(), words=cleaned)

        if not languages:
            raise ValueError(f"No language files (*.yaml) found in {self._base_dir}")
        return languages


def word_count_for(duration: TypingDuration) -> int:
    """One word per second of the attempt, never fewer than MIN_WORDS."""
    return max(MIN_WORDS, duration.seconds)


def generate_text(words: Sequence[str], count: int, rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    return " ".join(rng.choice(words) for _ in range(count))


class TextGenerator:
    """Callable text source for a session, bound to the selected language."""

    def __init__(self, languages: LanguageRepository, language: str, rng: Optional[random.Random] = None) -> None:
        self._languages = languages
        self._rng = rng or random.Random()
        self.language = language

    def __call__(self, duration: TypingDuration) -> str:
        words = self._languages.resolve(self.language).words
        return generate_text(words, word_count_for(duration), self._rng)
