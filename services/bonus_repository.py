"""
Persistence gateway for revenue, weekly bonus and audit tables.

Every engine component receives a BonusRepository instead of reaching for
a global session, so tests can hand in a repository bound to a throwaway
database or a mock.
"""
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from models import (
    Branch, Employee, DailyRevenue, EmployeeRevenue, WeeklyBonus, BonusDetail, BonusAuditLog,
)


class BonusRepository:
    """Query and persistence calls used by the bonus engine, bound to one session."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def flush(self) -> None:
        self.db.flush()

    # ------------------------------------------------------------------
    # Branches and employees (read-only, owned elsewhere)
    # ------------------------------------------------------------------

    def get_branch(self, branch_id: int) -> Optional[Branch]:
        return self.db.query(Branch).filter(Branch.id == branch_id).first()

    def list_active_branches(self) -> List[Branch]:
        return self.db.query(Branch).filter(Branch.is_active.is_(True)).order_by(Branch.id).all()

    def count_active_employees(self, branch_id: int) -> int:
        return self.db.query(func.count(Employee.id)).filter(
            Employee.branch_id == branch_id,
            Employee.is_active.is_(True),
        ).scalar() or 0

    def get_employees(self, employee_ids: Iterable[int]) -> List[Employee]:
        ids = list(employee_ids)
        if not ids:
            return []
        return self.db.query(Employee).filter(Employee.id.in_(ids)).all()

    # ------------------------------------------------------------------
    # Daily revenue
    # ------------------------------------------------------------------

    def get_daily_revenue_by_date(self, branch_id: int, revenue_date: date) -> Optional[DailyRevenue]:
        return self.db.query(DailyRevenue).filter(
            DailyRevenue.branch_id == branch_id,
            DailyRevenue.revenue_date == revenue_date,
        ).first()

    def add_daily_revenue(self, revenue: DailyRevenue) -> DailyRevenue:
        self.db.add(revenue)
        self.db.flush()
        return revenue

    def list_daily_revenues(
        self,
        branch_id: Optional[int],
        start_date: Optional[date],
        end_date: Optional[date],
    ) -> List[DailyRevenue]:
        query = self.db.query(DailyRevenue).options(
            joinedload(DailyRevenue.branch),
            joinedload(DailyRevenue.employee_revenues).joinedload(EmployeeRevenue.employee),
        )
        if branch_id:
            query = query.filter(DailyRevenue.branch_id == branch_id)
        if start_date:
            query = query.filter(DailyRevenue.revenue_date >= start_date)
        if end_date:
            query = query.filter(DailyRevenue.revenue_date <= end_date)
        return query.order_by(DailyRevenue.revenue_date.desc()).all()

    def count_daily_revenues(self, branch_id: int, start_date: date, end_date: date) -> int:
        return self.db.query(func.count(DailyRevenue.id)).filter(
            DailyRevenue.branch_id == branch_id,
            DailyRevenue.revenue_date >= start_date,
            DailyRevenue.revenue_date <= end_date,
        ).scalar() or 0

    def sum_contributions_by_employee(self, branch_id: int, start_date: date, end_date: date):
        """
        Per-employee totals of contributions whose daily entry falls in the range.

        Returns rows of (employee_id, employee_code, employee_name, weekly_revenue).
        """
        return self.db.query(
            EmployeeRevenue.employee_id,
            Employee.employee_code,
            Employee.name,
            func.sum(EmployeeRevenue.total).label("weekly_revenue"),
        ).join(
            DailyRevenue, EmployeeRevenue.daily_revenue_id == DailyRevenue.id
        ).join(
            Employee, EmployeeRevenue.employee_id == Employee.id
        ).filter(
            DailyRevenue.branch_id == branch_id,
            DailyRevenue.revenue_date >= start_date,
            DailyRevenue.revenue_date <= end_date,
        ).group_by(
            EmployeeRevenue.employee_id, Employee.employee_code, Employee.name
        ).order_by(EmployeeRevenue.employee_id).all()

    # ------------------------------------------------------------------
    # Weekly bonus records
    # ------------------------------------------------------------------

    def get_weekly_bonus(self, weekly_bonus_id: int, for_update: bool = False) -> Optional[WeeklyBonus]:
        query = self.db.query(WeeklyBonus).filter(WeeklyBonus.id == weekly_bonus_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_weekly_bonus_by_bucket(
        self,
        branch_id: int,
        year: int,
        month: int,
        week_number: int,
        for_update: bool = False,
    ) -> Optional[WeeklyBonus]:
        query = self.db.query(WeeklyBonus).filter(
            WeeklyBonus.branch_id == branch_id,
            WeeklyBonus.year == year,
            WeeklyBonus.month == month,
            WeeklyBonus.week_number == week_number,
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_weekly_bonus_with_details(
        self, branch_id: int, year: int, month: int, week_number: int
    ) -> Optional[WeeklyBonus]:
        return self.db.query(WeeklyBonus).options(
            joinedload(WeeklyBonus.branch),
            joinedload(WeeklyBonus.details).joinedload(BonusDetail.employee),
        ).filter(
            WeeklyBonus.branch_id == branch_id,
            WeeklyBonus.year == year,
            WeeklyBonus.month == month,
            WeeklyBonus.week_number == week_number,
        ).first()

    def add_weekly_bonus(self, bonus: WeeklyBonus) -> WeeklyBonus:
        """Insert and flush; raises IntegrityError when the bucket already exists."""
        self.db.add(bonus)
        self.db.flush()
        return bonus

    def list_weekly_bonuses(
        self,
        branch_id: Optional[int] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[WeeklyBonus]:
        query = self.db.query(WeeklyBonus).options(joinedload(WeeklyBonus.branch))
        if branch_id:
            query = query.filter(WeeklyBonus.branch_id == branch_id)
        if year:
            query = query.filter(WeeklyBonus.year == year)
        if month:
            query = query.filter(WeeklyBonus.month == month)
        if status:
            query = query.filter(WeeklyBonus.status == status)
        return query.order_by(
            WeeklyBonus.year.desc(),
            WeeklyBonus.month.desc(),
            WeeklyBonus.week_number.desc(),
            WeeklyBonus.branch_id,
        ).all()

    def list_requested_bonuses(self) -> List[WeeklyBonus]:
        return self.db.query(WeeklyBonus).options(
            joinedload(WeeklyBonus.branch),
        ).filter(
            WeeklyBonus.status == 'requested'
        ).order_by(WeeklyBonus.requested_at.asc(), WeeklyBonus.id.asc()).all()

    # ------------------------------------------------------------------
    # Bonus lines
    # ------------------------------------------------------------------

    def get_bonus_lines(self, weekly_bonus_id: int) -> List[BonusDetail]:
        return self.db.query(BonusDetail).filter(
            BonusDetail.weekly_bonus_id == weekly_bonus_id
        ).order_by(BonusDetail.employee_id).all()

    def replace_bonus_lines(self, weekly_bonus_id: int, lines: List[BonusDetail]) -> None:
        """
        Delete every line of the record and insert `lines`.

        Runs inside the caller's transaction; readers see either the old or
        the new set once the caller commits.
        """
        self.db.query(BonusDetail).filter(
            BonusDetail.weekly_bonus_id == weekly_bonus_id
        ).delete(synchronize_session="fetch")
        for line in lines:
            line.weekly_bonus_id = weekly_bonus_id
            self.db.add(line)
        self.db.flush()

    # ------------------------------------------------------------------
    # Audit trail (insert and select only)
    # ------------------------------------------------------------------

    def add_audit_entry(self, entry: BonusAuditLog) -> BonusAuditLog:
        self.db.add(entry)
        self.db.flush()
        return entry

    def get_audit_entries(self, weekly_bonus_id: int) -> List[BonusAuditLog]:
        return self.db.query(BonusAuditLog).filter(
            BonusAuditLog.weekly_bonus_id == weekly_bonus_id
        ).order_by(BonusAuditLog.performed_at.asc(), BonusAuditLog.id.asc()).all()
