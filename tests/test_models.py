import pytest
from pydantic import ValidationError

from plagiarism_detector.models import (
    DetectorConfig,
    DocumentRecord,
    DocumentStatus,
    PairResult,
    Verdict,
    get_json_schema,
)


def test_config_defaults():
    config = DetectorConfig()
    assert config.threshold == 70.0
    assert config.review_margin == 15.0
    assert config.min_tokens == 5
    assert config.workers == 1
    assert ".cpp" in config.extensions
    assert ".git" in config.skip_dirs


def test_extensions_are_normalized():
    config = DetectorConfig(extensions=["CPP", " .H ", "cpp", ""])
    assert config.extensions == [".cpp", ".h"]


@pytest.mark.parametrize(
    "field,value",
    [
        ("threshold", 150),
        ("threshold", -1),
        ("workers", 0),
        ("min_tokens", -5),
        ("extensions", []),
    ],
)
def test_invalid_config_rejected(field, value):
    with pytest.raises(ValidationError):
        DetectorConfig(**{field: value})


def test_config_from_json():
    config = DetectorConfig.model_validate_json('{"threshold": 55, "extensions": ["c"]}')
    assert config.threshold == 55.0
    assert config.extensions == [".c"]


def test_fingerprints_not_serialized():
    record = DocumentRecord(label="a.c", path="/tmp/a.c", fingerprints=frozenset({1, 2}), fingerprint_count=2)
    dumped = record.model_dump(mode="json")
    assert "fingerprints" not in dumped
    assert dumped["status"] == "ok"
    assert record.comparable


@pytest.mark.parametrize(
    "status",
    [
        DocumentStatus.syntax_error,
        DocumentStatus.too_short,
        DocumentStatus.unreadable,
        DocumentStatus.too_deep,
    ],
)
def test_skipped_record_is_not_comparable(status):
    record = DocumentRecord(label="b.c", path="b.c", status=status, error="skipped")
    assert not record.comparable
    assert record.model_dump(mode="json")["status"] == status.value


def test_pair_similarity_is_rounded():
    pair = PairResult(
        document1="a.c",
        document2="b.c",
        similarity=66.66666,
        shared_fingerprints=2,
        union_fingerprints=3,
        flagged=False,
        verdict=Verdict.NEEDS_REVIEW,
    )
    assert pair.similarity == 66.67
    assert pair.model_dump(mode="json")["verdict"] == "NEEDS_REVIEW"


def test_report_schema():
    schema = get_json_schema()
    assert set(schema["properties"]) == {"summary", "documents", "flagged_pairs", "pairs"}
