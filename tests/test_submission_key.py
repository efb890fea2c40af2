import uuid

from hiring_pipeline.utils.canonical_json import canonical_dumps, submission_key


def test_canonical_dumps_is_order_independent():
    assert canonical_dumps({"b": 1, "a": [2, 3]}) == canonical_dumps({"a": [2, 3], "b": 1}) == '{"a":[2,3],"b":1}'


def test_submission_key_normalizes_milestone_only():
    application_id = uuid.uuid4()
    key = submission_key(application_id, "Interview", b"proof")

    assert len(key) == 64
    assert submission_key(application_id, "  interview ", b"proof") == key
    assert submission_key(application_id, "Interview", b"other proof") != key
    assert submission_key(uuid.uuid4(), "Interview", b"proof") != key
    assert submission_key(application_id, "Offer", b"proof") != key
