"""
pytest adapter for the case modules.

A case returns (passed, message, details), the tuple tests/validation.py
reports on. Under pytest the case fails when passed is False and is
skipped when details carry 'skipped'.
"""

import pytest


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem):
    testargs = {arg: pyfuncitem.funcargs[arg] for arg in pyfuncitem._fixtureinfo.argnames}
    outcome = pyfuncitem.obj(**testargs)
    if outcome is None:
        return True

    passed, message, details = outcome
    if details.get('skipped'):
        pytest.skip(message)
    assert passed, f"{message} | {details}"
    return True
