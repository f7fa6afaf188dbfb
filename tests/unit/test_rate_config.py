"""Tests for rank / service band / tax transitions."""

import pytest

from otcalc.sdk.rate_config import repair, set_rank, set_service_band, set_tax_rate
from otcalc.sdk.rates import RATE_TABLE, lookup_rates, service_bands
from otcalc.sdk.schemas import Rank, RateConfig, TierRates


class TestSetRank:
    """Choosing a rank resolves the band and snapshots rates."""

    def test_invalid_band_falls_back_to_first(self):
        config = set_rank(RateConfig(), Rank.SERGEANT, "PC - Year 9")
        assert config.service == "Sgt - Point 1"
        assert config.rates == lookup_rates(Rank.SERGEANT, "Sgt - Point 1")

    def test_no_band_uses_first(self):
        config = set_rank(RateConfig(), Rank.CONSTABLE_POST_2013)
        assert config.service == "PC - Year 3"
        assert config.rates.r133 == 20.781

    def test_keeps_current_band_when_valid_for_new_rank(self):
        """PC - Year 4 exists for both constable ranks, so it is kept."""
        config = set_rank(RateConfig(), Rank.CONSTABLE_PRE_2013, "PC - Year 4")
        assert config.rates.r133 == 25.688

        switched = set_rank(config, Rank.CONSTABLE_POST_2013)
        assert switched.service == "PC - Year 4"
        assert switched.rates.r133 == 21.591

    def test_switch_to_rank_without_current_band(self):
        config = set_rank(RateConfig(), Rank.CONSTABLE_PRE_2013, "PC - Year 7+")
        switched = set_rank(config, Rank.SERGEANT)
        assert switched.service == "Sgt - Point 1"
        assert switched.rates.r200 == 49.431

    def test_accepts_display_name(self):
        config = set_rank(RateConfig(), "Sergeant", "Sgt - Point 3+")
        assert config.rank is Rank.SERGEANT
        assert config.rates.r150 == 38.901

    @pytest.mark.parametrize("rank", [None, "", "Inspector"])
    def test_clear_or_unknown_zeroes_rates(self, rank):
        config = set_rank(RateConfig(), Rank.SERGEANT)
        cleared = set_rank(config, rank)
        assert cleared.rank is None
        assert cleared.service is None
        assert cleared.rates == TierRates.zero()
        assert cleared.rank_configured is False

    def test_preserves_tax_rate(self):
        config = set_tax_rate(RateConfig(), 45)
        assert set_rank(config, Rank.SERGEANT).tax_rate == 45

    def test_returns_new_config(self):
        original = RateConfig()
        updated = set_rank(original, Rank.SERGEANT)
        assert original.rank is None
        assert updated is not original

    def test_every_pair_snapshots_table_rates(self):
        for rank in Rank:
            for band in service_bands(rank):
                config = set_rank(RateConfig(), rank, band)
                assert config.service == band
                assert config.rates == RATE_TABLE[rank][band]


class TestSetServiceBand:
    """Band changes within the selected rank."""

    def test_changes_band_and_rates(self):
        config = set_rank(RateConfig(), Rank.SERGEANT)
        updated = set_service_band(config, "Sgt - Point 2")
        assert updated.service == "Sgt - Point 2"
        assert updated.rates.r133 == 33.619

    def test_invalid_band_for_rank(self):
        config = set_rank(RateConfig(), Rank.SERGEANT, "Sgt - Point 2")
        updated = set_service_band(config, "PC - Year 5")
        assert updated.service == "Sgt - Point 1"

    def test_without_rank_is_noop(self):
        config = RateConfig()
        assert set_service_band(config, "Sgt - Point 1") == config


class TestSetTaxRate:
    """Tax rate must be one of the offered choices."""

    @pytest.mark.parametrize("rate", [20, 40, 45])
    def test_valid(self, rate):
        config = set_tax_rate(RateConfig(), rate)
        assert config.tax_rate == rate
        assert config.effective_tax_rate == rate

    @pytest.mark.parametrize("rate", [0, 30, 50, -1])
    def test_invalid(self, rate):
        with pytest.raises(ValueError, match="tax rate must be one of"):
            set_tax_rate(RateConfig(), rate)

    def test_default_when_unset(self):
        assert RateConfig().effective_tax_rate == 40


class TestRepair:
    """Loaded configs with bad band/rank combinations."""

    def test_valid_pair_keeps_stored_snapshot(self):
        custom = TierRates(r133=1, r150=2, r200=3)
        config = RateConfig(rank=Rank.SERGEANT, service="Sgt - Point 2", rates=custom)
        assert repair(config).rates == custom

    def test_invalid_band_resnapshots(self):
        config = RateConfig(rank=Rank.SERGEANT, service="PC - Year 4", rates=TierRates(r133=1))
        repaired = repair(config)
        assert repaired.service == "Sgt - Point 1"
        assert repaired.rates == lookup_rates(Rank.SERGEANT, "Sgt - Point 1")

    def test_no_rank_clears_leftovers(self):
        config = RateConfig(service="Sgt - Point 1", rates=TierRates(r133=5))
        repaired = repair(config)
        assert repaired.service is None
        assert repaired.rates == TierRates.zero()
