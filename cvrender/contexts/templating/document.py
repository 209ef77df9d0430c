"""
Resume Document Structure

Structured, caller-supplied resume content following the JSON Resume schema
(https://jsonresume.org/schema). Every field is optional and holds raw,
unescaped text: a Document is never handed to a template directly, only
through cvrender.contexts.templating.mapper.

JSON Resume uses camelCase keys (startDate, studyType, ...); from_dict()
accepts those as well as snake_case, and ignores keys it does not know.
"""

import json
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar, Dict, Iterator, List, Mapping, Optional

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", str(key)).lower()


class DocumentPart:
    """
    Shared loading and traversal for every Document dataclass.

    Subclasses list nested dataclass fields in _nested; everything else is
    taken as given (strings, or lists of strings).
    """

    _nested: ClassVar[Dict[str, type]] = {}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]):
        """
        Build an instance from a JSON Resume mapping.

        Raises:
            ValueError: If data (or a nested section) is not a mapping
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ValueError(f"{cls.__name__} expects a mapping, got {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _snake_case(key)
            # Unknown keys and explicit nulls keep the field default
            if name not in known or value is None:
                continue
            nested = cls._nested.get(name)
            if nested is not None and isinstance(value, list):
                value = [nested.from_dict(item) for item in value]
            elif nested is not None:
                value = nested.from_dict(value)
            kwargs[name] = value
        return cls(**kwargs)

    def text_leaves(self) -> Iterator[str]:
        """Yield every string value held by this part, recursively."""
        for f in fields(self):
            yield from _iter_strings(getattr(self, f.name))


def _iter_strings(value: Any) -> Iterator[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, DocumentPart):
        yield from value.text_leaves()
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _iter_strings(item)


@dataclass
class Location(DocumentPart):
    address: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    country_code: Optional[str] = None
    region: Optional[str] = None


@dataclass
class Profile(DocumentPart):
    network: Optional[str] = None
    username: Optional[str] = None
    url: Optional[str] = None


@dataclass
class Basics(DocumentPart):
    _nested: ClassVar[Dict[str, type]] = {"location": Location, "profiles": Profile}

    name: Optional[str] = None
    label: Optional[str] = None
    image: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    url: Optional[str] = None
    summary: Optional[str] = None
    location: Optional[Location] = None
    profiles: List[Profile] = field(default_factory=list)


@dataclass
class Work(DocumentPart):
    name: Optional[str] = None
    position: Optional[str] = None
    url: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    summary: Optional[str] = None
    highlights: List[str] = field(default_factory=list)


@dataclass
class Volunteer(DocumentPart):
    organization: Optional[str] = None
    position: Optional[str] = None
    url: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    summary: Optional[str] = None
    highlights: List[str] = field(default_factory=list)


@dataclass
class Education(DocumentPart):
    institution: Optional[str] = None
    url: Optional[str] = None
    area: Optional[str] = None
    study_type: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    score: Optional[str] = None
    courses: List[str] = field(default_factory=list)


@dataclass
class Award(DocumentPart):
    title: Optional[str] = None
    date: Optional[str] = None
    awarder: Optional[str] = None
    summary: Optional[str] = None


@dataclass
class Certificate(DocumentPart):
    name: Optional[str] = None
    date: Optional[str] = None
    issuer: Optional[str] = None
    url: Optional[str] = None


@dataclass
class Publication(DocumentPart):
    name: Optional[str] = None
    publisher: Optional[str] = None
    release_date: Optional[str] = None
    url: Optional[str] = None
    summary: Optional[str] = None


@dataclass
class Skill(DocumentPart):
    name: Optional[str] = None
    level: Optional[str] = None
    keywords: List[str] = field(default_factory=list)


@dataclass
class Language(DocumentPart):
    language: Optional[str] = None
    fluency: Optional[str] = None


@dataclass
class Interest(DocumentPart):
    name: Optional[str] = None
    keywords: List[str] = field(default_factory=list)


@dataclass
class Reference(DocumentPart):
    name: Optional[str] = None
    reference: Optional[str] = None


@dataclass
class Project(DocumentPart):
    name: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    entity: Optional[str] = None
    type: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    highlights: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    roles: List[str] = field(default_factory=list)


@dataclass
class Document(DocumentPart):
    """
    Complete resume as submitted by a caller.

    Attributes:
        basics: Personal information and contact details
        work, volunteer, education, awards, certificates, publications,
        skills, languages, interests, references, projects:
            JSON Resume sections, each a list (empty when absent)
    """

    _nested: ClassVar[Dict[str, type]] = {
        "basics": Basics,
        "work": Work,
        "volunteer": Volunteer,
        "education": Education,
        "awards": Award,
        "certificates": Certificate,
        "publications": Publication,
        "skills": Skill,
        "languages": Language,
        "interests": Interest,
        "references": Reference,
        "projects": Project,
    }

    basics: Basics = field(default_factory=Basics)
    work: List[Work] = field(default_factory=list)
    volunteer: List[Volunteer] = field(default_factory=list)
    education: List[Education] = field(default_factory=list)
    awards: List[Award] = field(default_factory=list)
    certificates: List[Certificate] = field(default_factory=list)
    publications: List[Publication] = field(default_factory=list)
    skills: List[Skill] = field(default_factory=list)
    languages: List[Language] = field(default_factory=list)
    interests: List[Interest] = field(default_factory=list)
    references: List[Reference] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)


def load_document(path: Path) -> Document:
    """
    Load a JSON Resume file.

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If the file is not valid JSON or not shaped like a resume
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Resume file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

    return Document.from_dict(data)
