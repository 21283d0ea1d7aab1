import pytest

from schemas.exam import ExpressionKey, Item, NumericKey
from scoring import score_item


def _numeric_item(value=10, tolerance=0.5):
    return Item(
        id="n1",
        prompt="p",
        modality="quant",
        answer_key=NumericKey(value=value, tolerance=tolerance),
    )


@pytest.mark.parametrize(
    "answer,expected",
    [
        ("10.4", True),
        (" 10 ", True),
        ("9.5", True),
        ("10.6", False),
        ("ten", False),
        ("inf", False),
        ("nan", False),
        ("1e999", False),
        ("1_0", False),
        ("0x0a", False),
        ("1e1", True),
        (".10e2", True),
        ("+10", True),
        ("", None),
        ("   ", None),
    ],
)
def test_numeric_tolerance(answer, expected):
    assert score_item(_numeric_item(), answer) is expected


def test_numeric_default_tolerance_is_exact():
    item = Item(id="n2", prompt="p", modality="quant", answer_key={"type": "numeric", "value": 11})
    assert score_item(item, "11") is True
    assert score_item(item, "11.0001") is False


def test_no_answer_key_is_indeterminate():
    item = Item(id="v1", prompt="p", modality="verbal")
    assert score_item(item, "anything") is None


def test_expression_key_uses_own_variables():
    item = Item(
        id="e1",
        prompt="p",
        modality="quant",
        answer_key=ExpressionKey(value="2*t + 2", variables=["t"]),
    )
    assert score_item(item, "2*(t+1)") is True


def test_expression_key_falls_back_to_item_variables():
    item = Item(
        id="e2",
        prompt="p",
        modality="quant",
        variables=["n"],
        answer_key=ExpressionKey(value="n^2"),
    )
    assert score_item(item, "n*n") is True


def test_expression_key_defaults_to_x():
    item = Item(id="e3", prompt="p", modality="quant", answer_key=ExpressionKey(value="x+x"))
    assert score_item(item, "2*x") is True


def test_expression_unparseable_is_false_not_indeterminate():
    item = Item(id="e4", prompt="p", modality="quant", answer_key=ExpressionKey(value="x+1"))
    assert score_item(item, "x+)") is False
    assert score_item(item, "") is False


def test_numeric_rejects_digit_separators():
    item = Item(id="n3", prompt="p", modality="quant", answer_key={"type": "numeric", "value": 1000})
    assert score_item(item, "1_000") is False
    assert score_item(item, "1000") is True
