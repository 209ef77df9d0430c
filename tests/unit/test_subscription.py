"""Unit tests for SubscriptionTier ordering and parsing."""

import pytest

from cvrender.contexts.templating.subscription import SubscriptionTier


@pytest.mark.unit
def test_ranks_are_strictly_ordered():
    """Test that tier ranks increase from FREE to PROFESSIONAL."""
    assert SubscriptionTier.FREE.rank < SubscriptionTier.BASIC.rank < SubscriptionTier.PROFESSIONAL.rank


@pytest.mark.unit
@pytest.mark.parametrize(
    "tier,other,expected",
    [
        (SubscriptionTier.FREE, SubscriptionTier.FREE, True),
        (SubscriptionTier.FREE, SubscriptionTier.BASIC, False),
        (SubscriptionTier.BASIC, SubscriptionTier.FREE, True),
        (SubscriptionTier.PROFESSIONAL, SubscriptionTier.BASIC, True),
        (SubscriptionTier.BASIC, SubscriptionTier.PROFESSIONAL, False),
    ],
)
def test_is_at_least(tier, other, expected):
    """Test tier comparison."""
    assert tier.is_at_least(other) is expected


@pytest.mark.unit
@pytest.mark.parametrize("value", ["basic", "BASIC", " Basic ", SubscriptionTier.BASIC])
def test_parse_accepts_names_case_insensitively(value):
    """Test parsing tier names regardless of case."""
    assert SubscriptionTier.parse(value) is SubscriptionTier.BASIC


@pytest.mark.unit
def test_parse_rejects_unknown_tier():
    """Test error handling for unknown tier names."""
    with pytest.raises(ValueError, match="Unknown subscription tier 'GOLD'"):
        SubscriptionTier.parse("GOLD")


@pytest.mark.unit
def test_lowest_and_highest():
    """Test the lowest and highest tier helpers."""
    assert SubscriptionTier.lowest() is SubscriptionTier.FREE
    assert SubscriptionTier.highest() is SubscriptionTier.PROFESSIONAL


@pytest.mark.unit
def test_str_and_display_name():
    """Test tier string forms."""
    assert str(SubscriptionTier.PROFESSIONAL) == "PROFESSIONAL"
    assert SubscriptionTier.PROFESSIONAL.display_name == "Professional"
