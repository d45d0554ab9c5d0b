"""Registry of special forms for the quasi evaluator.

Maps bare names to handler functions that implement non-standard evaluation
rules. The evaluator consults this table before ordinary function
application.
"""

from quasi.evaluation.special_forms.define_form import define_form
from quasi.evaluation.special_forms.if_form import if_form
from quasi.evaluation.special_forms.lambda_form import defun_form, lambda_form
from quasi.evaluation.special_forms.let_form import let_form
from quasi.evaluation.special_forms.progn_form import progn_form
from quasi.evaluation.special_forms.quote_form import quote_form
from quasi.evaluation.special_forms.set_form import set_form

SPECIAL_FORMS = {
    "quote": quote_form,
    "if": if_form,
    "let": let_form,
    "set": set_form,
    "progn": progn_form,
    "begin": progn_form,
    "lambda": lambda_form,
    "defun": defun_form,
    "define": define_form,
}
