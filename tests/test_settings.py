from backend.lib.settings import rates_from_env
from backend.lib.logger import get_logger
from backend.lib.tnb_bill_core.models import MEDIUM_VOLTAGE_TOU
import logging


def test_defaults_without_overrides(monkeypatch):
    for name in ("RATE_PEAK_ENERGY", "RATE_REBATE", "RATE_FUEL_ADJUSTMENT"):
        monkeypatch.delenv(name, raising=False)
    assert rates_from_env().rebate == MEDIUM_VOLTAGE_TOU.rebate


def test_rate_overrides(monkeypatch, caplog):
    monkeypatch.setenv("RATE_PEAK_ENERGY", "0.5")
    monkeypatch.setenv("RATE_FUEL_ADJUSTMENT", " ")
    monkeypatch.setenv("RATE_REBATE", "ten percent")

    with caplog.at_level(logging.WARNING):
        rates = rates_from_env()

    assert rates.peak_energy == 0.5
    assert rates.fuel_adjustment == MEDIUM_VOLTAGE_TOU.fuel_adjustment
    assert rates.rebate == MEDIUM_VOLTAGE_TOU.rebate
    assert "RATE_REBATE" in caplog.text
    # the module default is untouched
    assert MEDIUM_VOLTAGE_TOU.peak_energy == 0.3132


def test_logger_handlers_attached_once():
    first = get_logger("tnb-bill-test")
    second = get_logger("tnb-bill-test")
    assert first is second
    assert len(second.handlers) == 1
