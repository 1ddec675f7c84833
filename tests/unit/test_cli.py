import json

import pytest

from app import cli
from app.services.ai.adjustment import DISABLED_COMMENT


@pytest.mark.unit
def test_quote_prints_estimate_without_ai(capsys):
    cli.main(["quote", "--work-qty", "1000", "--carton-qty", "50", "--weight-per-carton", "20", "--urgency", "night"])
    out = json.loads(capsys.readouterr().out)
    assert out["ruleFee"] == 224000
    assert out["totalFee"] == 224000
    assert out["aiComment"] == DISABLED_COMMENT
    assert out["notices"] == []


@pytest.mark.unit
def test_quote_invalid_input_exits_2():
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["quote", "--work-qty", "-5", "--carton-qty", "1", "--weight-per-carton", "1"])
    assert excinfo.value.code == 2
