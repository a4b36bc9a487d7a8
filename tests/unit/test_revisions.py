"""Unit tests for domain/revisions.py: revision extraction and ordering."""

from __future__ import annotations

import pytest

from revision_manager.domain.models import (
    CertificateCondition,
    CertificateConditionType,
    ConditionStatus,
    OwnerReference,
    Revision,
)
from revision_manager.domain.revisions import (
    compute_surplus,
    filter_owned_requests,
    has_condition,
    is_controlled_by,
    is_ready,
    parse_revision,
    select_requests_to_prune,
    sort_requests_by_revision,
)
from tests.fixtures.certificates import make_certificate, make_request, ready_condition

# ---------------------------------------------------------------------------
# parse_revision
# ---------------------------------------------------------------------------


class TestParseRevision:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("0", 0), ("1", 1), ("123", 123), ("007", 7), ("900000000000", 900000000000)],
    )
    def test_valid(self, value, expected):
        assert parse_revision(value) == expected

    @pytest.mark.parametrize(
        "value",
        [None, "", "abc", "hello", "cert-manager", "-1", "+5", " 3", "3 ", "1_000", "1.5", "١٢"],
    )
    def test_invalid_returns_none(self, value):
        assert parse_revision(value) is None

    def test_int64_bounds(self):
        assert parse_revision("9223372036854775807") == 2**63 - 1
        assert parse_revision("9223372036854775808") is None

    def test_leading_zeros_do_not_count_towards_length(self):
        assert parse_revision("0" * 40 + "42") == 42

    @pytest.mark.parametrize("value", ["9" * 5000, "1" * 20, "1" + "0" * 4400])
    def test_oversized_returns_none(self, value):
        assert parse_revision(value) is None


# ---------------------------------------------------------------------------
# sort_requests_by_revision
# ---------------------------------------------------------------------------


class TestSortRequestsByRevision:
    def test_empty_list(self):
        assert sort_requests_by_revision([]) == []

    def test_single_request_without_revision(self):
        assert sort_requests_by_revision([make_request()]) == []

    def test_single_request_with_revision(self):
        req = make_request(revision="123")
        assert sort_requests_by_revision([req]) == [Revision(rev=123, request=req)]

    def test_badly_formed_revision_dropped(self):
        good = make_request("good", revision="123")
        bad = make_request("bad", revision="hello")
        assert sort_requests_by_revision([good, bad]) == [Revision(rev=123, request=good)]

    def test_mixed_revisions_sorted_ascending(self):
        reqs = [
            make_request("a", revision="123"),
            make_request("b", revision="hello"),
            make_request("c", revision="3"),
            make_request("d", revision="cert-manager"),
            make_request("e", revision="900"),
            make_request("f", revision="1"),
        ]
        result = sort_requests_by_revision(reqs)
        assert [r.rev for r in result] == [1, 3, 123, 900]
        assert [r.request.name for r in result] == ["f", "c", "a", "e"]

    def test_numeric_not_lexicographic_order(self):
        reqs = [make_request("ten", revision="10"), make_request("nine", revision="9")]
        assert [r.request.name for r in sort_requests_by_revision(reqs)] == ["nine", "ten"]

    def test_equal_revisions_keep_input_order(self):
        reqs = [
            make_request("cr-2", revision="2"),
            make_request("cr-3", revision="3"),
            make_request("cr-1", revision="1"),
            make_request("cr-4", revision="11"),
            make_request("cr-5", revision="11"),
            make_request("cr-6", revision="2"),
        ]
        result = sort_requests_by_revision(reqs)
        assert [r.request.name for r in result] == ["cr-1", "cr-2", "cr-6", "cr-3", "cr-4", "cr-5"]

    def test_equal_revisions_reversed_input(self):
        reqs = [make_request("y", revision="5"), make_request("x", revision="5")]
        assert [r.request.name for r in sort_requests_by_revision(reqs)] == ["y", "x"]

    def test_deterministic_and_input_untouched(self):
        reqs = [make_request("b", revision="2"), make_request("a", revision="1")]
        snapshot = list(reqs)
        first = sort_requests_by_revision(reqs)
        second = sort_requests_by_revision(reqs)
        assert first == second
        assert reqs == snapshot

    def test_accepts_generator(self):
        reqs = (make_request(str(i), revision=str(3 - i)) for i in range(3))
        assert [r.rev for r in sort_requests_by_revision(reqs)] == [1, 2, 3]


# ---------------------------------------------------------------------------
# Surplus selection
# ---------------------------------------------------------------------------


class TestSelectRequestsToPrune:
    def _revisions(self, n: int) -> list[Revision]:
        return [Revision(rev=i, request=make_request(f"cr-{i}", revision=str(i))) for i in range(n)]

    @pytest.mark.parametrize(
        ("count", "limit", "expected"),
        [(0, 0, 0), (2, 1, 1), (6, 3, 3), (2, 2, 0), (1, 5, 0), (4, 0, 4)],
    )
    def test_compute_surplus(self, count, limit, expected):
        assert compute_surplus(count, limit) == expected

    def test_returns_oldest_prefix(self):
        revisions = self._revisions(5)
        assert select_requests_to_prune(revisions, 2) == revisions[:3]

    def test_within_limit_returns_empty(self):
        assert select_requests_to_prune(self._revisions(3), 3) == []

    def test_zero_limit_prunes_everything(self):
        revisions = self._revisions(2)
        assert select_requests_to_prune(revisions, 0) == revisions


# ---------------------------------------------------------------------------
# Conditions and ownership
# ---------------------------------------------------------------------------


class TestConditions:
    def test_ready_true(self):
        assert is_ready(make_certificate()) is True

    def test_ready_false(self):
        crt = make_certificate(conditions=[ready_condition(ConditionStatus.FALSE)])
        assert is_ready(crt) is False

    def test_ready_unknown(self):
        crt = make_certificate(conditions=[ready_condition(ConditionStatus.UNKNOWN)])
        assert is_ready(crt) is False

    def test_no_conditions(self):
        assert is_ready(make_certificate(conditions=[])) is False

    def test_only_issuing_condition(self):
        crt = make_certificate(
            conditions=[
                CertificateCondition(
                    type=CertificateConditionType.ISSUING, status=ConditionStatus.TRUE
                )
            ]
        )
        assert is_ready(crt) is False
        assert has_condition(crt, CertificateConditionType.ISSUING, ConditionStatus.TRUE)


class TestOwnership:
    def test_controlled_by(self):
        crt = make_certificate()
        assert is_controlled_by(make_request(owner=crt), crt) is True

    def test_no_owner(self):
        assert is_controlled_by(make_request(), make_certificate()) is False

    def test_non_controller_reference(self):
        crt = make_certificate()
        req = make_request(
            owner_references=[OwnerReference(name=crt.name, uid=crt.uid, controller=False)]
        )
        assert is_controlled_by(req, crt) is False

    @pytest.mark.parametrize(
        "ref_overrides",
        [
            {"uid": "uid-other"},
            {"name": "other-cert"},
            {"kind": "Issuer"},
            {"api_version": "example.com/v1"},
        ],
    )
    def test_mismatched_controller(self, ref_overrides):
        crt = make_certificate()
        fields = {"name": crt.name, "uid": crt.uid, "controller": True, **ref_overrides}
        req = make_request(owner_references=[OwnerReference(**fields)])
        assert is_controlled_by(req, crt) is False

    def test_other_namespace(self):
        crt = make_certificate()
        assert is_controlled_by(make_request(owner=crt, namespace="elsewhere"), crt) is False

    def test_filter_preserves_order(self):
        crt = make_certificate()
        other = make_certificate(name="other", uid="uid-2")
        reqs = [
            make_request("a", owner=crt),
            make_request("b", owner=other),
            make_request("c"),
            make_request("d", owner=crt),
        ]
        assert [r.name for r in filter_owned_requests(reqs, crt)] == ["a", "d"]
