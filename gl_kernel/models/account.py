"""
Module: gl_kernel.models.account
Responsibility: ORM persistence for the Chart of Accounts, read by the SQL
    account repository and converted to immutable AccountSnapshot values.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/accounts.py only.

Invariants enforced:
    - code is unique per (tenant_id, company_id).
    - level 0 marks a control account; parent_id links a child to its parent.
"""

from uuid import UUID

from sqlalchemy import Boolean, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from gl_kernel.db.base import TrackedBase, UUIDString
from gl_kernel.domain.accounts import AccountSnapshot, AccountType


class Account(TrackedBase):
    """Chart of Accounts entry -- a single node in the ledger hierarchy."""

    __tablename__ = "accounts"

    __table_args__ = (
        UniqueConstraint("tenant_id", "company_id", "code", name="uq_account_company_code"),
        Index("idx_account_company", "tenant_id", "company_id"),
        Index("idx_account_parent", "parent_id"),
    )

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)

    company_id: Mapped[str] = mapped_column(String(64), nullable=False)

    code: Mapped[str] = mapped_column(String(50), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    account_type: Mapped[str] = mapped_column(String(20), nullable=False)

    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # 0 = top-level control account
    level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    parent_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    def __repr__(self) -> str:
        return f"<Account {self.code}: {self.name}>"

    def to_snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            id=str(self.id),
            code=self.code,
            name=self.name,
            account_type=AccountType(self.account_type),
            currency=self.currency,
            is_active=self.is_active,
            level=self.level,
            parent_id=str(self.parent_id) if self.parent_id is not None else None,
        )
