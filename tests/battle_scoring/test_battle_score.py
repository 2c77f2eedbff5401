"""
Tests for the Battle Score calculator.

============================================================
PURPOSE
============================================================
Verify the bull vs bear accumulation and the tug mapping.

TEST PRINCIPLES:
- Every category feeds exactly one side
- Tug stays inside [15, 85] whenever there is power
- Zero power keeps the caller's previous tug
- Only the most recent whale alerts count

============================================================
"""

import pytest

from battle_scoring import (
    BattleLeader,
    BattleScoreCalculator,
    BattleScoreConfig,
    MarketSnapshot,
    NEUTRAL_TUG_POSITION,
    WhaleAlert,
    WhaleAlertType,
    compute_battle,
)


# ============================================================
# FIXTURES
# ============================================================

def neutral_snapshot(**overrides) -> MarketSnapshot:
    """All categories at their neutral point, no whales."""
    values = dict(
        price_change_percent_24h=0.0,
        fear_greed_value=50,
        rsi=50.0,
        long_short_ratio=1.0,
        whale_alerts=None,
    )
    values.update(overrides)
    return MarketSnapshot.build(**values)


def buy(amount: float) -> WhaleAlert:
    return WhaleAlert(type=WhaleAlertType.BUY, amount_btc=amount)


def sell(amount: float) -> WhaleAlert:
    return WhaleAlert(type=WhaleAlertType.SELL, amount_btc=amount)


@pytest.fixture
def calculator():
    return BattleScoreCalculator()


# ============================================================
# END-TO-END SCENARIOS
# ============================================================

class TestScenarios:
    def test_strong_bull_market(self):
        snapshot = MarketSnapshot.build(
            price_change_percent_24h=5,
            fear_greed_value=80,
            rsi=70,
            long_short_ratio=1.5,
            whale_alerts=[],
        )

        result = compute_battle(snapshot, previous_tug=50)

        assert result.bull_power == pytest.approx(16.5)
        assert result.bear_power == 0
        assert result.tug_position == pytest.approx(15)
        assert result.leader == BattleLeader.BULLS

    def test_strong_bear_market(self):
        snapshot = MarketSnapshot.build(
            price_change_percent_24h=-3,
            fear_greed_value=20,
            rsi=30,
            long_short_ratio=0.5,
            whale_alerts=[sell(1000)],
        )

        result = compute_battle(snapshot, previous_tug=50)

        assert result.bear_power == pytest.approx(14.5)
        assert result.bull_power == 0
        assert result.tug_position == pytest.approx(85)
        assert result.leader == BattleLeader.BEARS


# ============================================================
# CATEGORY ISOLATION
# ============================================================

class TestCategories:
    def test_price_change_is_capped(self, calculator):
        result = calculator.compute(neutral_snapshot(price_change_percent_24h=12))
        breakdown = calculator.breakdown(neutral_snapshot(price_change_percent_24h=12))

        assert breakdown.contributions["price_change"] == (10.0, 0.0)
        # Neutral fear/greed, RSI and ratio still count toward bears with zero weight
        assert result.bull_power == pytest.approx(10.0)
        assert result.bear_power == 0

    def test_negative_price_change_feeds_bears(self, calculator):
        breakdown = calculator.breakdown(neutral_snapshot(price_change_percent_24h=-2.5))
        assert breakdown.contributions["price_change"] == (0.0, pytest.approx(5.0))

    @pytest.mark.parametrize(
        "overrides,category,expected",
        [
            ({"fear_greed_value": 90}, "fear_greed", (4.0, 0.0)),
            ({"fear_greed_value": 10}, "fear_greed", (0.0, 4.0)),
            ({"rsi": 80}, "rsi", (1.5, 0.0)),
            ({"rsi": 20}, "rsi", (0.0, 1.5)),
            ({"long_short_ratio": 1.2}, "long_short", (1.0, 0.0)),
            ({"long_short_ratio": 0.8}, "long_short", (0.0, 1.0)),
        ],
    )
    def test_each_category_feeds_one_side(self, calculator, overrides, category, expected):
        breakdown = calculator.breakdown(neutral_snapshot(**overrides))

        bull, bear = breakdown.contributions[category]
        assert bull == pytest.approx(expected[0])
        assert bear == pytest.approx(expected[1])
        assert bull == 0 or bear == 0

    def test_other_categories_stay_zero(self, calculator):
        breakdown = calculator.breakdown(neutral_snapshot(rsi=75))

        for name, (bull, bear) in breakdown.contributions.items():
            if name != "rsi":
                assert (bull, bear) == (0.0, 0.0), name

    def test_powers_are_never_negative(self, calculator):
        for change in (-50, -1, 0, 1, 50):
            for fng in (0, 49, 50, 51, 100):
                result = calculator.compute(
                    neutral_snapshot(price_change_percent_24h=change, fear_greed_value=fng)
                )
                assert result.bull_power >= 0
                assert result.bear_power >= 0


# ============================================================
# WHALE FLOW
# ============================================================

class TestWhaleFlow:
    def test_buys_and_sells_split(self, calculator):
        snapshot = neutral_snapshot(whale_alerts=[buy(500), sell(1500), buy(250)])

        bull, bear = calculator.breakdown(snapshot).contributions["whale_flow"]

        assert bull == pytest.approx(1.5)
        assert bear == pytest.approx(3.0)

    def test_only_ten_most_recent_alerts_count(self, calculator):
        # Most recent first: ten buys, then an old sell that falls out of the window
        alerts = [buy(500)] * 10 + [sell(5000)]
        snapshot = neutral_snapshot(whale_alerts=alerts)

        breakdown = calculator.breakdown(snapshot)

        assert breakdown.whale_alerts_used == 10
        assert breakdown.contributions["whale_flow"] == (pytest.approx(10.0), 0.0)

    def test_custom_window(self):
        calculator = BattleScoreCalculator(BattleScoreConfig(whale_window=2))
        snapshot = neutral_snapshot(whale_alerts=[buy(500), buy(500), sell(500)])

        assert calculator.whale_window(snapshot) == (buy(500), buy(500))

    def test_empty_alerts(self, calculator):
        breakdown = calculator.breakdown(neutral_snapshot())
        assert breakdown.whale_alerts_used == 0
        assert breakdown.contributions["whale_flow"] == (0.0, 0.0)


# ============================================================
# TUG POSITION
# ============================================================

class TestTugPosition:
    def test_zero_power_keeps_previous_tug(self, calculator):
        result = calculator.compute(neutral_snapshot(), previous_tug=62.5)

        assert result.total_power == 0
        assert result.tug_position == 62.5
        assert result.leader == BattleLeader.EVEN

    def test_default_previous_tug_is_neutral(self):
        result = compute_battle(neutral_snapshot())
        assert result.tug_position == NEUTRAL_TUG_POSITION

    def test_balanced_power_is_centered(self, calculator):
        result = calculator.compute(neutral_snapshot(whale_alerts=[buy(1000), sell(1000)]))
        assert result.tug_position == pytest.approx(50.0)

    def test_partial_imbalance(self, calculator):
        # bull 3, bear 1 -> 50 - 0.5 * 35
        result = calculator.compute(neutral_snapshot(whale_alerts=[buy(1500), sell(500)]))
        assert result.tug_position == pytest.approx(32.5)

    @pytest.mark.parametrize("change", [-40, -5, -0.1, 0.1, 3, 40])
    def test_tug_bounds(self, calculator, change):
        result = calculator.compute(
            neutral_snapshot(price_change_percent_24h=change, rsi=65, whale_alerts=[sell(900)])
        )
        assert 15 <= result.tug_position <= 85

    def test_rising_price_never_pushes_tug_right(self, calculator):
        previous = None
        for change in (-6, -3, -1, 0, 1, 2, 4, 8):
            result = calculator.compute(
                neutral_snapshot(
                    price_change_percent_24h=change,
                    fear_greed_value=40,
                    whale_alerts=[buy(700), sell(1200)],
                )
            )
            if previous is not None:
                assert result.tug_position <= previous
            previous = result.tug_position


# ============================================================
# SERIALIZATION
# ============================================================

class TestSerialization:
    def test_result_to_dict(self):
        result = compute_battle(neutral_snapshot(whale_alerts=[buy(1000)]))
        data = result.to_dict()

        assert data["bull_power"] == pytest.approx(2.0)
        assert data["bear_power"] == 0
        assert data["leader"] == "bulls"
        assert data["total_power"] == pytest.approx(2.0)

    def test_breakdown_to_dict(self, calculator):
        data = calculator.breakdown(neutral_snapshot(rsi=70)).to_dict()

        assert set(data["contributions"]) == {
            "price_change", "fear_greed", "rsi", "long_short", "whale_flow"
        }
        assert data["contributions"]["rsi"] == {"bull": pytest.approx(1.0), "bear": 0.0}
