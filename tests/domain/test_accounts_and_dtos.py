"""Account snapshots, hierarchy and posting DTOs."""

import json
from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal

import pytest

from gl_kernel.domain.accounts import (
    AccountHierarchy,
    AccountSnapshot,
    AccountSnapshotSet,
    AccountType,
    NormalBalance,
)
from gl_kernel.domain.dtos import (
    JournalLine,
    JournalPostingRequest,
    LineSide,
    PostingResult,
)
from gl_kernel.domain.sod import Role


class TestAccountSnapshot:
    def test_type_and_currency_coerced(self):
        account = AccountSnapshot("a", "1", "Cash", "asset", " myr ")
        assert account.account_type is AccountType.ASSET
        assert account.currency == "MYR"

    def test_normal_balance_by_type(self):
        assert AccountType.ASSET.normal_balance is NormalBalance.DEBIT
        assert AccountType.EXPENSE.normal_balance is NormalBalance.DEBIT
        assert AccountType.LIABILITY.normal_balance is NormalBalance.CREDIT
        assert AccountType.EQUITY.normal_balance is NormalBalance.CREDIT
        assert AccountType.REVENUE.normal_balance is NormalBalance.CREDIT

    def test_negative_level_rejected(self):
        with pytest.raises(ValueError):
            AccountSnapshot("a", "1", "Cash", AccountType.ASSET, "MYR", level=-1)

    def test_control_level(self):
        assert AccountSnapshot("a", "1", "A", AccountType.ASSET, "MYR", level=0).is_control_level
        assert not AccountSnapshot("a", "1", "A", AccountType.ASSET, "MYR").is_control_level

    def test_immutable(self):
        account = AccountSnapshot("a", "1", "Cash", AccountType.ASSET, "MYR")
        with pytest.raises(FrozenInstanceError):
            account.is_active = False


class TestHierarchy:
    def test_children_index(self, chart):
        hierarchy = AccountHierarchy.from_accounts(chart)
        assert hierarchy.is_parent("acc-parent-001")
        assert hierarchy.children_of("acc-parent-001") == ("acc-child-001",)
        assert not hierarchy.is_parent("acc-child-001")
        assert hierarchy.children_of("acc-asset-001") == ()

    def test_snapshot_set_is_read_only(self, accounts_by_id, chart):
        snapshot = AccountSnapshotSet.build(accounts_by_id, chart)
        with pytest.raises(TypeError):
            snapshot.accounts["x"] = None
        assert snapshot.hierarchy.is_parent("acc-parent-001")

    def test_snapshot_set_copies_input(self, accounts_by_id, chart):
        snapshot = AccountSnapshotSet.build(accounts_by_id, chart)
        accounts_by_id.clear()
        assert "acc-asset-001" in snapshot.accounts


class TestJournalLine:
    def test_side_and_amount(self):
        line = JournalLine("a", debit=12.5)
        assert line.debit == Decimal("12.5")
        assert line.side is LineSide.DEBIT
        assert line.amount == Decimal("12.5")
        assert line.credit_amount == Decimal("0")

    def test_ambiguous_side(self):
        assert JournalLine("a", debit=1, credit=1).side is None
        assert JournalLine("a").side is None

    def test_unparseable_amount_rejected(self):
        with pytest.raises(ValueError):
            JournalLine("a", debit="ten")


class TestJournalPostingRequest:
    def test_lines_frozen_to_tuple(self, make_context):
        request = JournalPostingRequest(
            "JE-1", None, date(2024, 1, 1), "MYR",
            [JournalLine("a", debit=1), JournalLine("b", credit=1)],
            make_context(),
        )
        assert isinstance(request.lines, tuple)

    def test_account_ids_deduplicated_in_order(self, make_context):
        request = JournalPostingRequest(
            "JE-1", None, date(2024, 1, 1), "MYR",
            [JournalLine("b", debit=1), JournalLine("a", credit=1), JournalLine("b", debit=1)],
            make_context(),
        )
        assert request.account_ids == ("b", "a")


class TestPostingResult:
    def test_to_dict_is_json_serializable(self):
        result = PostingResult(
            journal_number="JE-1",
            total_debit=Decimal("100.00"),
            total_credit=Decimal("100.00"),
            requires_approval=True,
            approver_roles=(Role.ADMIN, Role.MANAGER),
        )
        payload = result.to_dict()
        assert payload["validated"] is True
        assert payload["approver_roles"] == ["admin", "manager"]
        assert payload["total_debit"] == "100.00"
        assert payload["fx"] is None
        json.dumps(payload)
