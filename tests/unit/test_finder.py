"""Unit tests for finding a template and enforcing tier access."""

import pytest

from cvrender.contexts.templating.exceptions import (
    TemplateAccessDeniedError,
    TemplateNotFoundError,
)
from cvrender.contexts.templating.finder import TemplateFinder
from cvrender.contexts.templating.source_resolver import (
    TemplateSourceResolver,
    TemplateStoreRegistry,
)
from cvrender.contexts.templating.subscription import SubscriptionTier
from tests.helpers import InMemoryTemplateStore, make_metadata

FREE = SubscriptionTier.FREE
BASIC = SubscriptionTier.BASIC
PROFESSIONAL = SubscriptionTier.PROFESSIONAL


@pytest.fixture
def finder():
    """A FREE caller with an empty premium store ahead of the default store."""
    premium = InMemoryTemplateStore([], "premium")
    default = InMemoryTemplateStore(
        [make_metadata("modern", FREE), make_metadata("executive", PROFESSIONAL)], "default"
    )
    registry = TemplateStoreRegistry({"premium": premium, "default": default})
    return TemplateFinder(TemplateSourceResolver(registry, ["premium", "default"]))


@pytest.mark.unit
def test_free_template_is_returned(finder):
    """Test finding a template the tier may use."""
    assert finder.find_by_id_and_validate_access("modern", "user-1", FREE).id == "modern"


@pytest.mark.unit
def test_premium_template_is_denied_not_hidden(finder):
    """Test that a higher-tier template is denied rather than not found."""
    with pytest.raises(TemplateAccessDeniedError) as exc_info:
        finder.find_by_id_and_validate_access("executive", "user-1", FREE)

    error = exc_info.value
    assert error.template_id == "executive"
    assert error.required_tier is PROFESSIONAL
    assert error.caller_tier is FREE
    assert "Professional" in error.user_message
    assert error.to_dict() == {
        "templateId": "executive",
        "requiredTier": "PROFESSIONAL",
        "callerTier": "FREE",
    }


@pytest.mark.unit
def test_unknown_template_is_not_found(finder):
    """Test TemplateNotFoundError for an unknown id."""
    with pytest.raises(TemplateNotFoundError) as exc_info:
        finder.find_by_id_and_validate_access("missing", "user-1", FREE)
    assert exc_info.value.template_id == "missing"


@pytest.mark.unit
def test_not_found_takes_precedence_over_access(finder):
    """An unknown id is NotFound for every tier, never AccessDenied."""
    for tier in SubscriptionTier:
        with pytest.raises(TemplateNotFoundError):
            finder.find_by_id_and_validate_access("missing", "user-1", tier)


@pytest.mark.unit
def test_sufficient_tier_gets_premium_template(finder):
    """Test access for a sufficient tier."""
    assert finder.find_by_id_and_validate_access("executive", "u", PROFESSIONAL).id == "executive"


@pytest.mark.unit
def test_first_store_match_decides_access():
    """Test that the first matching store decides access."""
    override = InMemoryTemplateStore([make_metadata("shared", BASIC)], "override")
    default = InMemoryTemplateStore([make_metadata("shared", FREE)], "default")
    registry = TemplateStoreRegistry({"override": override, "default": default})
    finder = TemplateFinder(TemplateSourceResolver(registry, ["override", "default"]))

    with pytest.raises(TemplateAccessDeniedError):
        finder.find_by_id_and_validate_access("shared", "user-1", FREE)
    assert finder.find_by_id_and_validate_access("shared", "user-1", BASIC).required_tier is BASIC
