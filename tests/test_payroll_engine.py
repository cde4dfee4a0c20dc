import os
from datetime import date
from decimal import Decimal

import pytest

from tcms_api import create_app
from tcms_api.extensions import db
from tcms_api.models.employee import Employee
from tcms_api.models.payroll.salary import MonthlySalary
from tcms_api.services import payroll_engine, salary_records, salary_adjustments
from tcms_api.services.payroll_errors import PeriodInvalid


def _mk_app():
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    app = create_app()
    return app


@pytest.fixture
def app():
    app = _mk_app()
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


def _emps(*rows):
    out = []
    for code, salary, status in rows:
        e = Employee(name=code, employee_code=code, salary=Decimal(salary) if salary is not None else None,
                     status=status)
        db.session.add(e)
        out.append(e)
    db.session.commit()
    return out


def test_generate_is_idempotent(app):
    a, b = _emps(("A", "5000", "active"), ("B", "4200", "active"))
    first = payroll_engine.generate_for_period(3, 2025)
    assert first["generated_count"] == 2
    assert len(first["ids"]) == 2

    sid = salary_records.find_for_period(a.id, 3, 2025).id
    salary_adjustments.add_adjustment(sid, a.id, "deduction", 200, "late")

    again = payroll_engine.generate_for_period(3, 2025)
    assert again == {"generated_count": 0, "ids": []}
    assert MonthlySalary.query.count() == 2
    s = salary_records.get_salary(sid)
    assert s.net_salary == Decimal("4800.00")
    assert len(s.adjustments) == 1


def test_generate_skips_inactive_and_fills_gaps(app):
    a, b, c = _emps(("A", "5000", "active"), ("B", "4000", "inactive"), ("C", "3000", "on_leave"))
    salary_records.create_salary(a.id, 5, 2025, "5100")

    res = payroll_engine.generate_for_period(5, 2025)
    assert res["generated_count"] == 0

    d, = _emps(("D", None, "active"))
    res = payroll_engine.generate_for_period(5, 2025)
    assert res["generated_count"] == 1
    s = salary_records.get_salary(res["ids"][0])
    assert s.employee_id == d.id
    assert s.base_salary == Decimal("0.00")
    # manual record kept its own base
    assert salary_records.find_for_period(a.id, 5, 2025).base_salary == Decimal("5100.00")


def test_base_salary_is_a_snapshot(app):
    e, = _emps(("E", "5000", "active"))
    sid = payroll_engine.generate_for_period(1, 2025)["ids"][0]

    e.salary = Decimal("6500")
    db.session.commit()

    assert salary_records.get_salary(sid).base_salary == Decimal("5000.00")
    feb = payroll_engine.generate_for_period(2, 2025)["ids"][0]
    assert salary_records.get_salary(feb).base_salary == Decimal("6500.00")


def test_generate_rejects_bad_period(app):
    _emps(("E", "5000", "active"))
    with pytest.raises(PeriodInvalid):
        payroll_engine.generate_for_period(13, 2025)
    with pytest.raises(PeriodInvalid):
        payroll_engine.generate_for_period(1, 1999)
    assert MonthlySalary.query.count() == 0


def test_period_statistics(app):
    a, b, c = _emps(("A", "5000", "active"), ("B", "6000", "active"), ("C", "1000", "active"))
    sa = salary_records.create_salary(a.id, 3, 2025, 5000)
    salary_adjustments.add_adjustment(sa.id, a.id, "deduction", 200, "late")
    sb = salary_records.create_salary(b.id, 3, 2025, 6000)
    salary_records.mark_paid(sb.id)

    st = payroll_engine.period_statistics(2025)
    assert st["total_pending"] == Decimal("4800.00")
    assert st["total_paid"] == Decimal("6000.00")
    assert st["employee_count"] == 2

    # cancelled records count toward employees but not toward either total
    sc = salary_records.create_salary(c.id, 4, 2025, 1000)
    salary_records.cancel_salary(sc.id)
    # other years are ignored
    salary_records.create_salary(c.id, 4, 2024, 999)

    st = payroll_engine.period_statistics(2025)
    assert st["total_pending"] == Decimal("4800.00")
    assert st["total_paid"] == Decimal("6000.00")
    assert st["employee_count"] == 3

    empty = payroll_engine.period_statistics(2030)
    assert empty == {"total_paid": Decimal("0.00"), "total_pending": Decimal("0.00"), "employee_count": 0}


def test_monthly_totals(app):
    a, b = _emps(("A", "5000", "active"), ("B", "3000", "active"))
    sa = salary_records.create_salary(a.id, 7, 2025, 5000)
    salary_records.create_salary(b.id, 7, 2025, 3000)
    salary_records.mark_paid(sa.id)
    salary_records.create_salary(a.id, 8, 2025, 5000)

    assert payroll_engine.monthly_paid_total(2025, 7) == Decimal("5000.00")
    assert payroll_engine.monthly_paid_total(2025, 8) == Decimal("0.00")
    assert payroll_engine.monthly_totals_by_status(2025, 7) == {
        "paid": Decimal("5000.00"), "pending": Decimal("3000.00"), "total": Decimal("8000.00"),
    }


def test_listing_and_history_order(app):
    a, b = _emps(("A", "100", "active"), ("B", "200", "active"))
    for m in (1, 2, 3):
        payroll_engine.generate_for_period(m, 2025)
    salary_records.create_salary(a.id, 12, 2024, 100)

    rows = payroll_engine.list_for_period(year=2025)
    assert [(r.month, r.employee_id) for r in rows] == [
        (3, a.id), (3, b.id), (2, a.id), (2, b.id), (1, a.id), (1, b.id),
    ]
    assert len(payroll_engine.list_for_period(month=2, year=2025)) == 2
    assert [r.year for r in payroll_engine.list_for_period(employee_id=a.id)] == [2025, 2025, 2025, 2024]

    hist = payroll_engine.employee_history(a.id, 2025)
    assert [r.month for r in hist] == [3, 2, 1]
    assert payroll_engine.employee_history(a.id, 2024)[0].month == 12


def test_history_defaults_to_current_year(app):
    e, = _emps(("E", "100", "active"))
    this_year = date.today().year
    salary_records.create_salary(e.id, 1, this_year, 100)
    salary_records.create_salary(e.id, 1, this_year - 1, 100)
    rows = payroll_engine.employee_history(e.id)
    assert [r.year for r in rows] == [this_year]


def test_generate_skips_row_inserted_by_concurrent_run(tmp_path, monkeypatch):
    # file-backed db so a second connection can commit while the session is mid-generation
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'race.db'}")
    app = create_app()
    with app.app_context():
        db.create_all()
        a, b = _emps(("A", "5000", "active"), ("B", "4200", "active"))
        a_id, b_id = a.id, b.id

        real_new_salary = payroll_engine.new_salary

        def racing_new_salary(employee_id, month, year, base_salary, notes=None):
            if employee_id == a_id:
                with db.engine.begin() as conn:
                    conn.execute(MonthlySalary.__table__.insert().values(
                        employee_id=a_id, month=month, year=year, base_salary=Decimal("5000.00"),
                        total_deductions=Decimal("0.00"), total_bonuses=Decimal("0.00"),
                        net_salary=Decimal("5000.00"), status="pending",
                    ))
            return real_new_salary(employee_id, month, year, base_salary, notes)

        monkeypatch.setattr(payroll_engine, "new_salary", racing_new_salary)
        res = payroll_engine.generate_for_period(3, 2025)

        assert res["generated_count"] == 1
        assert len(res["ids"]) == 1
        assert salary_records.get_salary(res["ids"][0]).employee_id == b_id
        rows = MonthlySalary.query.filter_by(month=3, year=2025).all()
        assert sorted(r.employee_id for r in rows) == [a_id, b_id]

        db.session.remove()
        db.drop_all()
