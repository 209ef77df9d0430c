"""
Render Model

Template-facing view of a Document. Instances are built only by
cvrender.contexts.templating.mapper.to_render_model, which guarantees:

- every user text leaf is LaTeX-escaped exactly once
- dates are either normalised (YYYY, YYYY-MM, YYYY-MM-DD) or escaped as text
- URLs are percent-encoded, then escaped
- absent optional fields are None and absent lists are []

Templates may therefore print any field verbatim.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class LocationModel:
    address: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    country_code: Optional[str] = None
    region: Optional[str] = None


@dataclass
class ProfileModel:
    network: Optional[str] = None
    username: Optional[str] = None
    url: Optional[str] = None


@dataclass
class BasicsModel:
    name: Optional[str] = None
    label: Optional[str] = None
    image: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    url: Optional[str] = None
    summary: Optional[str] = None
    location: Optional[LocationModel] = None
    profiles: List[ProfileModel] = field(default_factory=list)


@dataclass
class WorkModel:
    name: Optional[str] = None
    position: Optional[str] = None
    url: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    summary: Optional[str] = None
    highlights: List[str] = field(default_factory=list)


@dataclass
class VolunteerModel:
    organization: Optional[str] = None
    position: Optional[str] = None
    url: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    summary: Optional[str] = None
    highlights: List[str] = field(default_factory=list)


@dataclass
class EducationModel:
    institution: Optional[str] = None
    url: Optional[str] = None
    area: Optional[str] = None
    study_type: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    score: Optional[str] = None
    courses: List[str] = field(default_factory=list)


@dataclass
class AwardModel:
    title: Optional[str] = None
    date: Optional[str] = None
    awarder: Optional[str] = None
    summary: Optional[str] = None


@dataclass
class CertificateModel:
    name: Optional[str] = None
    date: Optional[str] = None
    issuer: Optional[str] = None
    url: Optional[str] = None


@dataclass
class PublicationModel:
    name: Optional[str] = None
    publisher: Optional[str] = None
    release_date: Optional[str] = None
    url: Optional[str] = None
    summary: Optional[str] = None


@dataclass
class SkillModel:
    name: Optional[str] = None
    level: Optional[str] = None
    keywords: List[str] = field(default_factory=list)


@dataclass
class LanguageModel:
    language: Optional[str] = None
    fluency: Optional[str] = None


@dataclass
class InterestModel:
    name: Optional[str] = None
    keywords: List[str] = field(default_factory=list)


@dataclass
class ReferenceModel:
    name: Optional[str] = None
    reference: Optional[str] = None


@dataclass
class ProjectModel:
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
class RenderModel:
    """Escaped resume, ready to be placed into LaTeX markup."""

    basics: BasicsModel = field(default_factory=BasicsModel)
    work: List[WorkModel] = field(default_factory=list)
    volunteer: List[VolunteerModel] = field(default_factory=list)
    education: List[EducationModel] = field(default_factory=list)
    awards: List[AwardModel] = field(default_factory=list)
    certificates: List[CertificateModel] = field(default_factory=list)
    publications: List[PublicationModel] = field(default_factory=list)
    skills: List[SkillModel] = field(default_factory=list)
    languages: List[LanguageModel] = field(default_factory=list)
    interests: List[InterestModel] = field(default_factory=list)
    references: List[ReferenceModel] = field(default_factory=list)
    projects: List[ProjectModel] = field(default_factory=list)

    def to_context(self) -> Dict[str, Any]:
        """Nested plain dict handed to the template engine (None values kept)."""
        return asdict(self)
