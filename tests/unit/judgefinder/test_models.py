"""
Tests for judgefinder models and their invariants.
"""

import pytest

from src.judgefinder.errors import InternalError, RecordMappingError
from src.judgefinder.models import (
    Court,
    FoundBy,
    Judge,
    ResolutionResult,
    SearchResponse,
    SearchResult,
    SearchResultKind,
)


def _judge(id="j-1", name="Jane A. Doe", slug="jane-a-doe"):
    return Judge(id=id, name=name, slug=slug)


class TestJudge:
    def test_identifier_prefers_stored_slug(self):
        assert _judge(slug="custom-slug").identifier == "custom-slug"

    def test_identifier_derived_when_missing(self):
        assert _judge(name="Hon. Jane A. Doe", slug=None).identifier == "jane-a-doe"

    def test_from_row_maps_optional_fields(self):
        judge = Judge.from_row(
            {"id": 7, "name": "Jane Doe", "slug": "", "total_cases": None, "court_name": "X"}
        )
        assert judge.id == "7"
        assert judge.slug is None
        assert judge.total_cases == 0
        assert judge.court_name == "X"
        assert judge.jurisdiction is None

    @pytest.mark.parametrize("missing", ["id", "name"])
    def test_from_row_requires_id_and_name(self, missing):
        row = {"id": "j-1", "name": "Jane Doe"}
        row[missing] = None
        with pytest.raises(RecordMappingError) as exc_info:
            Judge.from_row(row)
        assert exc_info.value.code == "RECORD_MAPPING"
        assert exc_info.value.missing_field == missing


class TestCourt:
    def test_from_row_reads_type_column(self):
        court = Court.from_row({"id": "c-1", "name": "Orange County Superior Court", "type": "state"})
        assert court.court_type == "state"
        assert court.identifier == "orange-county-superior-court"

    def test_requires_name(self):
        with pytest.raises(RecordMappingError):
            Court.from_row({"id": "c-1"})


class TestResolutionResult:
    def test_exact_identifier_rejects_alternatives(self):
        with pytest.raises(InternalError):
            ResolutionResult(
                judge=_judge(),
                found_by=FoundBy.EXACT_IDENTIFIER,
                alternatives=(_judge(id="j-2"),),
            )

    def test_judge_required_unless_not_found(self):
        with pytest.raises(InternalError):
            ResolutionResult(judge=None, found_by=FoundBy.EXACT_NAME)

    def test_not_found_must_not_carry_judge(self):
        with pytest.raises(InternalError):
            ResolutionResult(judge=_judge(), found_by=FoundBy.NOT_FOUND)

    def test_alternative_limits(self):
        four = tuple(_judge(id=f"j-{i}") for i in range(4))
        with pytest.raises(InternalError):
            ResolutionResult(judge=_judge(), found_by=FoundBy.PARTIAL_NAME, alternatives=four)

        six = tuple(_judge(id=f"j-{i}") for i in range(6))
        with pytest.raises(InternalError):
            ResolutionResult.not_found(six)

        assert len(ResolutionResult.not_found(six[:5]).alternatives) == 5

    def test_dict_round_trip(self):
        result = ResolutionResult(
            judge=_judge(),
            found_by=FoundBy.PARTIAL_NAME,
            alternatives=(_judge(id="j-2", name="Jane B. Doe", slug="jane-b-doe"),),
        )
        data = result.to_dict()
        assert data["found_by"] == "partial_name"
        assert ResolutionResult.from_dict(data) == result

    def test_not_found_round_trip(self):
        result = ResolutionResult.not_found()
        assert result.found is False
        assert ResolutionResult.from_dict(result.to_dict()) == result


class TestSearchResponse:
    def test_dict_round_trip(self):
        hit = SearchResult(
            kind=SearchResultKind.COURT,
            id="c-1",
            title="Orange County Superior Court",
            subtitle="state Court",
            description="CA • 12 judges",
            url="/courts/orange-county-superior-court",
            relevance_score=60.0,
            attributes={"judge_count": 12},
        )
        response = SearchResponse(
            results=(hit,),
            results_by_type={SearchResultKind.COURT: (hit,), SearchResultKind.JUDGE: ()},
            counts_by_type={SearchResultKind.COURT: 1, SearchResultKind.JUDGE: 0},
            total_count=1,
            query="orange",
            took_ms=3.5,
        )
        data = response.to_dict()
        assert data["results"][0]["type"] == "court"
        assert SearchResponse.from_dict(data) == response
