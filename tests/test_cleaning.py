import json

from utils.cleaning import ResponseCleaner


def test_strip_reasoning_blocks():
    text = "<think>let me score this</think>\n{\"score\": 80}"
    assert ResponseCleaner.strip_reasoning(text) == '{"score": 80}'
    assert ResponseCleaner.strip_reasoning("half a thought</think>Answer") == "Answer"


def test_extract_json_object_fixes_trailing_commas():
    text = 'Here you go: {"score": 75, "feedback": "Good",} thanks'
    assert json.loads(ResponseCleaner.extract_json_object(text)) == {"score": 75, "feedback": "Good"}
    assert ResponseCleaner.extract_json_object("no json here") is None


def test_extract_json_array():
    text = '<think>six questions</think>[{"id": "q1"}, {"id": "q2"},]'
    assert json.loads(ResponseCleaner.extract_json_array(text)) == [{"id": "q1"}, {"id": "q2"}]
    assert ResponseCleaner.extract_json_array("{}") is None


def test_clean_summary():
    text = "<think>draft</think>```\nStrong candidate.\n\n\n\nHire.\n```"
    assert ResponseCleaner.clean_summary(text) == "Strong candidate.\n\nHire."
