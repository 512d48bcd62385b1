import pytest
from datetime import date

from freezegun import freeze_time

from degree_planner.core.config import Settings
from degree_planner.schemas.financials import (
    ExamOption,
    FinancialInputs,
    FinancialRules,
    ReplacedProvider,
)
from degree_planner.services.financial_calculator import (
    calculate_financials,
    rules_from_settings,
    sessions_for_courses,
)


@pytest.fixture
def rules():
    return FinancialRules(
        program_fee=7000,
        session_cost=1800,
        baseline_sessions=2,
        budget_ceiling=15000,
        card_fee_pct=3.0,
        ach_fee_pct=0.8,
        wire_fee_flat=25,
    )


@pytest.mark.unit
class TestSessions:
    """Test in-residence session estimate"""

    @pytest.mark.parametrize("courses,expected", [(0, 2), (2, 2), (10, 2), (11, 3), (15, 3), (16, 4)])
    def test_sessions_for_courses(self, courses, expected):
        assert sessions_for_courses(courses) == expected


@pytest.mark.unit
class TestCompletionTarget:
    """Test completion dates"""

    @pytest.mark.parametrize(
        "start,months,expected",
        [
            (date(2026, 1, 31), 1, date(2026, 2, 28)),
            (date(2024, 1, 31), 1, date(2024, 2, 29)),
            (date(2026, 11, 15), 3, date(2027, 2, 15)),
        ],
    )
    def test_completion_target(self, rules, start, months, expected):
        result = calculate_financials(
            FinancialInputs(pace_months=months, sessions_actual=2, phase1_cost=0), rules, start
        )

        assert result.completion_target == expected


@pytest.mark.unit
class TestCalculateFinancials:
    """Test projected totals and payment schedule"""

    def test_base_total_on_budget(self, rules):
        result = calculate_financials(
            FinancialInputs(pace_months=12, sessions_actual=2, phase1_cost=660), rules, date(2026, 1, 1)
        )

        assert result.projected_total == 11260
        assert result.over_budget is False
        assert result.overage_reasons == []
        assert result.warnings == []
        assert result.upfront_due == 7000

    def test_card_fee_per_installment(self, rules):
        result = calculate_financials(
            FinancialInputs(pace_months=12, sessions_actual=3, phase1_cost=3000), rules, date(2026, 1, 1)
        )

        assert result.projected_total == 15400
        assert result.remaining == 8400
        assert result.payment_method_fees.per_installment == 21
        assert result.monthly_payment == 721
        assert result.payment_method_fees.total == 252

    def test_over_budget_reasons(self, rules):
        result = calculate_financials(
            FinancialInputs(pace_months=12, sessions_actual=3, phase1_cost=3000), rules, date(2026, 1, 1)
        )

        assert result.over_budget is True
        assert result.overage_reasons == ["Extra in-residence session(s)"]
        assert "$15,000" in result.warnings[0]

    @pytest.mark.parametrize("method,fee", [("ach", 5.6), ("wire", 25), ("paypal", 0)])
    def test_other_payment_methods(self, rules, method, fee):
        result = calculate_financials(
            FinancialInputs(pace_months=12, sessions_actual=3, phase1_cost=3000, payment_method=method),
            rules,
            date(2026, 1, 1),
        )

        assert result.payment_method_fees.per_installment == pytest.approx(fee)

    def test_premium_exam_delta(self, rules):
        inputs = FinancialInputs(
            pace_months=10,
            sessions_actual=2,
            phase1_cost=1000,
            exam=ExamOption(use=True, exam_code="OPI-SPAN", credits=3, exam_cost=500),
            replaced_provider=ReplacedProvider(provider="Sophia", per_credit_est=100),
        )

        result = calculate_financials(inputs, rules, date(2026, 1, 1))

        assert result.projected_total == 11800
        assert result.includes_premium_exam is True
        assert result.overage_reasons == ["Premium language exam"]

    def test_duration_multiplier(self, rules):
        rules = rules.model_copy(update={"duration_multipliers": {6: 1.1}})

        result = calculate_financials(
            FinancialInputs(pace_months=6, sessions_actual=2, phase1_cost=0), rules, date(2026, 1, 1)
        )

        assert result.duration_multiplier == 1.1
        assert result.projected_total == pytest.approx(11660)

    def test_schedule_matches_pace(self, rules):
        result = calculate_financials(
            FinancialInputs(pace_months=12, sessions_actual=2, phase1_cost=660), rules, date(2026, 1, 1)
        )

        assert len(result.monthly_schedule) == 12
        assert [m.month for m in result.monthly_schedule] == list(range(1, 13))
        assert result.monthly_schedule[-1].remaining_balance == 0
        assert result.monthly_schedule[0].payment_method == "card"

    @freeze_time("2026-01-31")
    def test_dates_default_to_today(self, rules):
        result = calculate_financials(FinancialInputs(pace_months=1, sessions_actual=2, phase1_cost=0), rules)

        assert result.start_date == date(2026, 1, 31)
        assert result.completion_target == date(2026, 2, 28)


@pytest.mark.unit
class TestRulesFromSettings:
    """Test settings-driven rules"""

    def test_defaults(self):
        rules = rules_from_settings(Settings(_env_file=None))

        assert rules.program_fee == 7000
        assert rules.session_cost == 1800
        assert rules.budget_ceiling == 15000
