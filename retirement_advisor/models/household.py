"""
Household parameter set — the complete configuration the projection engine
was run with.

Hierarchy::

    HouseholdParameters
      ├── people: list[Person]
      │     ├── income_sources: list[IncomeSource]
      │     └── super_accounts: list[SuperAccount]
      └── loans: list[Loan]

Single-earner households use the flat legacy fields (``annual_salary``,
``loan_principal``, ``super_contribution_rate`` ...). Multi-person households
populate ``people`` and set ``household_mode="couple"``.

All models are frozen. Person-targeted changes never mutate an instance;
``advice.targeting.apply_person_advice`` builds a new parameter set instead.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from retirement_advisor.taxonomy.advice_taxonomy import HouseholdMode, PaymentFrequency

MAX_AGE = 120


class IncomeSource(BaseModel):
    """One stream of income belonging to a person (or the household).

    Attributes:
        id: Unique identifier within the owning person.
        label: Display label, e.g. ``"Salary"``.
        amount: Amount per ``frequency`` period.
        frequency: Payment frequency.
        is_before_tax: ``True`` for gross income.
        person_id: Owning person, or ``None`` for household-level income.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    label: str = "Income"
    amount: float = 0.0
    frequency: PaymentFrequency = PaymentFrequency.YEARLY
    is_before_tax: bool = True
    person_id: Optional[str] = None

    @property
    def annual_amount(self) -> float:
        return self.amount * self.frequency.periods_per_year


class SuperAccount(BaseModel):
    """Superannuation (retirement savings) account.

    Attributes:
        id: Unique identifier within the owning person.
        label: Display label.
        balance: Current balance.
        contribution_rate: Percentage of gross income contributed, e.g. ``11.0``.
        return_rate: Expected annual return as a percentage.
        person_id: Owning person.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    label: str = "Super"
    balance: float = 0.0
    contribution_rate: float = 11.0
    return_rate: float = 7.0
    person_id: Optional[str] = None

    @field_validator("contribution_rate")
    @classmethod
    def validate_contribution_rate(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"contribution_rate must be in [0, 100], got {v}.")
        return v


class Loan(BaseModel):
    """An amortising loan, optionally with an offset account attached.

    Attributes:
        id: Unique loan identifier (natural key for loan milestones).
        label: Display label, e.g. ``"Home Loan"``.
        principal: Outstanding principal at the start of the projection.
        interest_rate: Annual interest rate as a percentage.
        payment_amount: Payment per ``payment_frequency`` period.
        payment_frequency: How often ``payment_amount`` is paid.
        has_offset: Whether an offset account reduces interest on this loan.
        offset_balance: Current offset balance.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    label: str = "Loan"
    principal: float = 0.0
    interest_rate: float = 0.0
    payment_amount: float = 0.0
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    has_offset: bool = False
    offset_balance: float = 0.0

    @property
    def monthly_payment(self) -> float:
        return self.payment_amount * self.payment_frequency.periods_per_year / 12.0


class Person(BaseModel):
    """A member of a multi-person household."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    current_age: int
    retirement_age: int
    income_sources: list[IncomeSource] = []
    super_accounts: list[SuperAccount] = []

    @field_validator("current_age", "retirement_age")
    @classmethod
    def validate_age(cls, v: int) -> int:
        if not 0 <= v <= MAX_AGE:
            raise ValueError(f"age must be in [0, {MAX_AGE}], got {v}.")
        return v

    @property
    def annual_before_tax_income(self) -> float:
        """Sum of this person's gross income sources, annualised."""
        return sum(src.annual_amount for src in self.income_sources if src.is_before_tax)

    def find_income_source(self, source_id: str) -> Optional[IncomeSource]:
        return next((s for s in self.income_sources if s.id == source_id), None)

    def find_super_account(self, account_id: str) -> Optional[SuperAccount]:
        return next((a for a in self.super_accounts if a.id == account_id), None)


class HouseholdParameters(BaseModel):
    """Complete household configuration.

    Percentages (tax, interest, return, contribution rates) are stored as
    whole-number percentages, e.g. ``6.0`` for 6 %.
    """

    model_config = ConfigDict(frozen=True)

    # Household
    household_mode: HouseholdMode = HouseholdMode.SINGLE
    people: list[Person] = []

    # Income (single-earner fields)
    annual_salary: float = 0.0
    salary_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    income_tax_rate: float = 0.0

    # Expenses
    monthly_living_expenses: float = 0.0
    monthly_rent_or_mortgage: float = 0.0

    # Loans
    loan_principal: float = 0.0
    loan_interest_rate: float = 0.0
    loan_payment_amount: float = 0.0
    loan_payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    use_offset_account: bool = False
    current_offset_balance: float = 0.0
    loans: list[Loan] = []

    # Investments
    monthly_investment_contribution: float = 0.0
    investment_return_rate: float = 7.0
    current_investment_balance: float = 0.0

    # Superannuation (single-earner fields)
    super_contribution_rate: float = 11.0
    super_return_rate: float = 7.0
    current_super_balance: float = 0.0

    # Retirement
    desired_annual_retirement_income: float = 0.0
    retirement_age: int = 65
    current_age: int = 30

    @field_validator("income_tax_rate")
    @classmethod
    def validate_tax_rate(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"income_tax_rate must be in [0, 100], got {v}.")
        return v

    @property
    def is_multi_person(self) -> bool:
        return self.household_mode == HouseholdMode.COUPLE and len(self.people) > 0

    @property
    def years_to_retirement(self) -> int:
        return self.retirement_age - self.current_age

    @property
    def legacy_monthly_loan_payment(self) -> float:
        return self.loan_payment_amount * self.loan_payment_frequency.periods_per_year / 12.0

    def find_person(self, person_id: str) -> Optional[Person]:
        return next((p for p in self.people if p.id == person_id), None)
