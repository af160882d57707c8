from .taxpayer import FilingStatus, Person, Dependent, DependentRelationship
from .documents import (
    W2Info,
    W2Box12Entry,
    Form1099INT,
    Form1099DIV,
    Form1099R,
    Form1099G,
    Form1099MISC,
    Form1099NEC,
    Form1099SA,
    SSA1099,
    Form8949Category,
    CapitalTransaction,
    ScheduleCBusiness,
    ScheduleEProperty,
    RSUVestEvent,
    ISOExercise,
    K1EntityType,
    ScheduleK1,
)
from .deductions import Deductions, DeductionMethod, ItemizedDeductions, IRAContributions, HSAInfo, HSACoverage
from .credits import DependentCareInfo, EnergyCreditInputs, EducationExpense, EducationCreditType
from .state import ResidencyType, StateReturnConfig
from .tax_return import TaxReturn, PriorYearInfo, EstimatedTaxPayments, NonresidentAlienInfo

__all__ = [
    'FilingStatus',
    'Person',
    'Dependent',
    'DependentRelationship',
    'W2Info',
    'W2Box12Entry',
    'Form1099INT',
    'Form1099DIV',
    'Form1099R',
    'Form1099G',
    'Form1099MISC',
    'Form1099NEC',
    'Form1099SA',
    'SSA1099',
    'Form8949Category',
    'CapitalTransaction',
    'ScheduleCBusiness',
    'ScheduleEProperty',
    'RSUVestEvent',
    'ISOExercise',
    'K1EntityType',
    'ScheduleK1',
    'Deductions',
    'DeductionMethod',
    'ItemizedDeductions',
    'IRAContributions',
    'HSAInfo',
    'HSACoverage',
    'DependentCareInfo',
    'EnergyCreditInputs',
    'EducationExpense',
    'EducationCreditType',
    'ResidencyType',
    'StateReturnConfig',
    'TaxReturn',
    'PriorYearInfo',
    'EstimatedTaxPayments',
    'NonresidentAlienInfo',
]
