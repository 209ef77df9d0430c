"""
Document to RenderModel mapping.

The only way to obtain a RenderModel. Each text field passes through
to_latex() exactly once here; templates must not escape again.

Field rules:
    text    -> to_latex(value), blank -> None
    date    -> stripped value if it is YYYY, YYYY-MM or YYYY-MM-DD, else escaped as text
    url     -> escape_url(value), blank -> None
    list    -> each item mapped by the rule of its field, blanks dropped
"""

import re
from typing import Any, Iterable, List, Optional

from cvrender.contexts.templating.document import (
    Award,
    Basics,
    Certificate,
    Document,
    Education,
    Interest,
    Language,
    Location,
    Profile,
    Project,
    Publication,
    Reference,
    Skill,
    Volunteer,
    Work,
)
from cvrender.contexts.templating.render_model import (
    AwardModel,
    BasicsModel,
    CertificateModel,
    EducationModel,
    InterestModel,
    LanguageModel,
    LocationModel,
    ProfileModel,
    ProjectModel,
    PublicationModel,
    ReferenceModel,
    RenderModel,
    SkillModel,
    VolunteerModel,
    WorkModel,
)
from cvrender.utils.latex_escaping import escape_url, to_latex

ISO_DATE_PATTERN = re.compile(r"^\d{4}(-(0[1-9]|1[0-2])(-(0[1-9]|[12]\d|3[01]))?)?$")


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value)
    if not value.strip():
        return None
    return to_latex(value)


def _texts(values: Optional[Iterable[Any]]) -> List[str]:
    # A bare string stands for a one-item list
    if isinstance(values, str):
        values = [values]
    return [escaped for escaped in (_text(v) for v in values or []) if escaped is not None]


def _date(value: Any) -> Optional[str]:
    """Normalised ISO date, or the escaped text for anything else ("Present", "Spring 2020")."""
    if value is None:
        return None
    value = str(value).strip()
    if not value:
        return None
    if ISO_DATE_PATTERN.match(value):
        return value
    return to_latex(value)


def _url(value: Any) -> Optional[str]:
    if value is None or not str(value).strip():
        return None
    return escape_url(str(value).strip())


def _location(location: Optional[Location]) -> Optional[LocationModel]:
    if location is None:
        return None
    return LocationModel(
        address=_text(location.address),
        postal_code=_text(location.postal_code),
        city=_text(location.city),
        country_code=_text(location.country_code),
        region=_text(location.region),
    )


def _profile(profile: Profile) -> ProfileModel:
    return ProfileModel(
        network=_text(profile.network),
        username=_text(profile.username),
        url=_url(profile.url),
    )


def _basics(basics: Optional[Basics]) -> BasicsModel:
    if basics is None:
        return BasicsModel()
    return BasicsModel(
        name=_text(basics.name),
        label=_text(basics.label),
        image=_url(basics.image),
        email=_text(basics.email),
        phone=_text(basics.phone),
        url=_url(basics.url),
        summary=_text(basics.summary),
        location=_location(basics.location),
        profiles=[_profile(p) for p in basics.profiles or []],
    )


def _work(work: Work) -> WorkModel:
    return WorkModel(
        name=_text(work.name),
        position=_text(work.position),
        url=_url(work.url),
        location=_text(work.location),
        start_date=_date(work.start_date),
        end_date=_date(work.end_date),
        summary=_text(work.summary),
        highlights=_texts(work.highlights),
    )


def _volunteer(volunteer: Volunteer) -> VolunteerModel:
    return VolunteerModel(
        organization=_text(volunteer.organization),
        position=_text(volunteer.position),
        url=_url(volunteer.url),
        start_date=_date(volunteer.start_date),
        end_date=_date(volunteer.end_date),
        summary=_text(volunteer.summary),
        highlights=_texts(volunteer.highlights),
    )


def _education(education: Education) -> EducationModel:
    return EducationModel(
        institution=_text(education.institution),
        url=_url(education.url),
        area=_text(education.area),
        study_type=_text(education.study_type),
        start_date=_date(education.start_date),
        end_date=_date(education.end_date),
        score=_text(education.score),
        courses=_texts(education.courses),
    )


def _award(award: Award) -> AwardModel:
    return AwardModel(
        title=_text(award.title),
        date=_date(award.date),
        awarder=_text(award.awarder),
        summary=_text(award.summary),
    )


def _certificate(certificate: Certificate) -> CertificateModel:
    return CertificateModel(
        name=_text(certificate.name),
        date=_date(certificate.date),
        issuer=_text(certificate.issuer),
        url=_url(certificate.url),
    )


def _publication(publication: Publication) -> PublicationModel:
    return PublicationModel(
        name=_text(publication.name),
        publisher=_text(publication.publisher),
        release_date=_date(publication.release_date),
        url=_url(publication.url),
        summary=_text(publication.summary),
    )


def _skill(skill: Skill) -> SkillModel:
    return SkillModel(
        name=_text(skill.name),
        level=_text(skill.level),
        keywords=_texts(skill.keywords),
    )


def _language(language: Language) -> LanguageModel:
    return LanguageModel(language=_text(language.language), fluency=_text(language.fluency))


def _interest(interest: Interest) -> InterestModel:
    return InterestModel(name=_text(interest.name), keywords=_texts(interest.keywords))


def _reference(reference: Reference) -> ReferenceModel:
    return ReferenceModel(name=_text(reference.name), reference=_text(reference.reference))


def _project(project: Project) -> ProjectModel:
    return ProjectModel(
        name=_text(project.name),
        description=_text(project.description),
        url=_url(project.url),
        entity=_text(project.entity),
        type=_text(project.type),
        start_date=_date(project.start_date),
        end_date=_date(project.end_date),
        highlights=_texts(project.highlights),
        keywords=_texts(project.keywords),
        roles=_texts(project.roles),
    )


def to_render_model(document: Document) -> RenderModel:
    """
    Convert a caller Document into an escaped RenderModel.

    Args:
        document: Raw resume content

    Returns:
        RenderModel whose text leaves are all safe to print into LaTeX
    """
    return RenderModel(
        basics=_basics(document.basics),
        work=[_work(w) for w in document.work],
        volunteer=[_volunteer(v) for v in document.volunteer],
        education=[_education(e) for e in document.education],
        awards=[_award(a) for a in document.awards],
        certificates=[_certificate(c) for c in document.certificates],
        publications=[_publication(p) for p in document.publications],
        skills=[_skill(s) for s in document.skills],
        languages=[_language(lang) for lang in document.languages],
        interests=[_interest(i) for i in document.interests],
        references=[_reference(r) for r in document.references],
        projects=[_project(p) for p in document.projects],
    )
