import pytest

from services.tiers import SubscriptionTier, parse_tier


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("pro", SubscriptionTier.PRO),
        ("power", SubscriptionTier.POWER),
        ("basic", SubscriptionTier.BASIC),
        (" PRO ", SubscriptionTier.PRO),
        (None, SubscriptionTier.BASIC),
        ("", SubscriptionTier.BASIC),
        ("enterprise", SubscriptionTier.BASIC),
    ],
)
def test_parse_tier(raw, expected):
    assert parse_tier(raw) is expected


def test_price_key_and_label():
    assert SubscriptionTier.POWER.price_key == "PRICE_POWER"
    assert SubscriptionTier.PRO.label == "Pro"
