import pytest

from app.services import classification


@pytest.mark.unit
@pytest.mark.parametrize(
    "location, airport, port, new_port, primary",
    [
        ("인천공항", True, True, False, True),
        ("인천항", False, True, False, True),
        ("인천신항", False, True, True, True),
        ("평택항", False, True, False, False),
        ("Incheon New Port", False, True, True, True),
        ("경기권 물류센터", False, False, False, False),
        ("", False, False, False, False),
        (None, False, False, False, False),
    ],
)
def test_location_categories(location, airport, port, new_port, primary):
    assert classification.is_airport(location) is airport
    assert classification.is_port(location) is port
    assert classification.is_new_port(location) is new_port
    assert classification.is_primary_area(location) is primary


@pytest.mark.unit
def test_product_categories():
    assert classification.is_frozen("냉동식품", None, None)
    assert classification.is_frozen(None, "냉장창고", None)
    assert classification.is_frozen(None, None, "FROZEN goods")
    assert classification.is_sack("밀가루 분말", None)
    assert classification.is_sack(None, "마대 포장")
    assert classification.is_bulky("기저귀")
    assert classification.is_alcohol("Wine")
    assert classification.is_alcohol("유리병 소스")

    assert not classification.is_alcohol("기술 서적")
    assert not classification.is_bulky(None)


@pytest.mark.unit
def test_method_and_memo_categories():
    assert classification.is_sewing_method("박음질")
    assert classification.is_sewing_method("Sewing")
    assert classification.is_witness_method("입회")
    assert classification.is_witness_method("기타")
    assert not classification.is_witness_method("스티커")

    assert classification.has_urgent_memo("야간 작업 요청")
    assert classification.has_urgent_memo("RUSH please")
    assert not classification.has_urgent_memo("일반 작업")


@pytest.mark.unit
@pytest.mark.parametrize("location", ["Transport center", "export hub", "Passport office"])
def test_english_port_keyword_needs_whole_word(location):
    assert classification.is_port(location) is False
    assert classification.is_airport(location) is False


@pytest.mark.unit
@pytest.mark.parametrize("method", ["another label", "Mother box", "Stickering"])
def test_english_method_keywords_need_whole_word(method):
    assert classification.is_witness_method(method) is False
    assert classification.is_sewing_method(method) is False


@pytest.mark.unit
def test_english_memo_keywords_need_whole_word():
    assert not classification.has_urgent_memo("overnight storage is fine, brush off dust")
    assert not classification.is_frozen("unfrozen", None, None)
    assert classification.has_urgent_memo("Night shift")
