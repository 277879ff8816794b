"""Variables and component interpolation slots used in a message."""
from __future__ import annotations

import re
from typing import List

from .errors import GrammarError, log_then_raise

_re_variable = re.compile(r"\{\w+\}")
_re_brace = re.compile(r"[{}]")


def parse_vars(form: str) -> List[str]:
    """
    Return the sorted ``{name}`` tokens of one plural form.

    A name appears once for each time it is used. Call this for each form of
    a pluralized message.
    """
    variables = sorted(_re_variable.findall(form))
    # Braces used outside of variables could be an issue.
    if len(_re_brace.findall(form)) != 2 * len(variables):
        log_then_raise(form, "unexpected brace", GrammarError)
    return variables
