import pytest

from hiring_pipeline.utils.json_extraction import JsonExtractionError, extract_json_payload


def test_extracts_object_wrapped_in_prose_and_fences():
    text = 'Sure! Here is the result:\n```json\n{"success": true, "message": "Looks genuine"}\n```\nThanks.'
    assert extract_json_payload(text) == {"success": True, "message": "Looks genuine"}


def test_extracts_array_when_it_comes_first():
    assert extract_json_payload('result: [{"a": 1}] done') == [{"a": 1}]


def test_uses_last_closing_brace():
    text = '{"success": false, "message": "Logo {blurred}"} trailing'
    assert extract_json_payload(text)["message"] == "Logo {blurred}"


@pytest.mark.parametrize(
    "text",
    [
        "",
        "no json here",
        '{"success": true',
        '{"success": tru}',
    ],
)
def test_undecodable_text_raises(text):
    with pytest.raises(JsonExtractionError):
        extract_json_payload(text)
