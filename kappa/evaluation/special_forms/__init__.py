"""Registry of special forms for the Kappa evaluator.

Maps Symbols to handler functions that implement non-standard evaluation rules.
The evaluator consults this table to dispatch special forms before ordinary
function application. Handlers take (tail, env, evaluate_fn, is_tail_call).
"""

from kappa.types.symbol import Symbol
from kappa.evaluation.special_forms.set_form import set_form
from kappa.evaluation.special_forms.progn_form import progn_form
from kappa.evaluation.special_forms.import_form import import_form
from kappa.evaluation.special_forms.quote_form import quote_form
from kappa.evaluation.special_forms.lambda_form import lambda_form
from kappa.evaluation.special_forms.define_form import define_form
from kappa.evaluation.special_forms.if_form import if_form
from kappa.evaluation.special_forms.condition_case_form import condition_case_form, cond_form
from kappa.evaluation.special_forms.with_form import with_form

SPECIAL_FORMS = {
    Symbol("set"): set_form,
    Symbol("progn"): progn_form,
    Symbol("begin"): progn_form,
    Symbol("import"): import_form,
    Symbol("quote"): quote_form,
    Symbol("lambda"): lambda_form,
    Symbol("define"): define_form,
    Symbol("if"): if_form,
    Symbol("cond"): cond_form,
    Symbol("condition-case"): condition_case_form,
    Symbol("with"): with_form,
}
