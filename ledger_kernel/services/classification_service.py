"""
Services for the user-owned reference data a journal is classified with.

Responsibility:
    Lookups for bills, categories, budgets and tags, scoped to one user.
    Categories and tags are created by name when missing; bills and budgets
    are never created here.

Architecture position:
    Kernel > Services.  Used by the relationship steps of
    JournalUpdateService.
"""

from sqlalchemy import select

from ledger_kernel.domain.request import coerce_uuid
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.reference import Bill, Budget, Category, Tag
from ledger_kernel.services.base import UserScopedService

logger = get_logger("services.classification")


def _clean_name(value: object) -> str | None:
    if value is None:
        return None
    name = str(value).strip()
    return name or None


class BillService(UserScopedService[Bill]):

    def find(self, bill_id: object = None, bill_name: object = None) -> Bill | None:
        """Bill by id, then by name; None when neither matches."""
        uid = coerce_uuid(bill_id)
        if uid is not None:
            bill = self.session.get(Bill, uid)
            if bill is not None and bill.user_id == self.user_id:
                return bill

        name = _clean_name(bill_name)
        if name is None:
            return None
        return self.session.scalars(
            select(Bill).where(Bill.user_id == self.user_id, Bill.name == name)
        ).first()


class CategoryService(UserScopedService[Category]):

    def find_or_create(
        self,
        category_id: object = None,
        category_name: object = None,
    ) -> Category | None:
        """Category by id, then by name (created if missing); None clears."""
        uid = coerce_uuid(category_id)
        if uid is not None:
            category = self.session.get(Category, uid)
            if category is not None and category.user_id == self.user_id:
                return category

        name = _clean_name(category_name)
        if name is None:
            return None

        category = self.session.scalars(
            select(Category).where(Category.user_id == self.user_id, Category.name == name)
        ).first()
        if category is None:
            category = Category(user_id=self.user_id, name=name, created_by_id=self.actor_id)
            self.session.add(category)
            self.session.flush()
            logger.info("category_created", extra={"category_id": str(category.id), "category_name": name})
        return category


class BudgetService(UserScopedService[Budget]):

    def find(self, budget_id: object = None, budget_name: object = None) -> Budget | None:
        """Budget by id, then by name; None when neither matches."""
        uid = coerce_uuid(budget_id)
        if uid is not None:
            budget = self.session.get(Budget, uid)
            if budget is not None and budget.user_id == self.user_id:
                return budget

        name = _clean_name(budget_name)
        if name is None:
            return None
        return self.session.scalars(
            select(Budget).where(Budget.user_id == self.user_id, Budget.name == name)
        ).first()


class TagService(UserScopedService[Tag]):

    def find_or_create(self, name: str) -> Tag:
        tag = self.session.scalars(
            select(Tag).where(Tag.user_id == self.user_id, Tag.tag == name)
        ).first()
        if tag is None:
            tag = Tag(user_id=self.user_id, tag=name, created_by_id=self.actor_id)
            self.session.add(tag)
            self.session.flush()
            logger.info("tag_created", extra={"tag": name})
        return tag

    def find_or_create_all(self, names: object) -> list[Tag]:
        """
        Tags for ``names`` in submission order.

        Empty names and duplicates are skipped; None (or any non-list value)
        yields no tags.
        """
        if not isinstance(names, (list, tuple)):
            return []
        tags: list[Tag] = []
        seen: set[str] = set()
        for raw in names:
            name = _clean_name(raw)
            if name is None or name in seen:
                continue
            seen.add(name)
            tags.append(self.find_or_create(name))
        return tags
