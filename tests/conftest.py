from __future__ import annotations

import pytest

from kappa_ref.host import HostContext

# switches a developer's shell may carry into the run
KAPPA_ENV_VARS = ("KAPPA_DEBUG_PY_TRACE", "KAPPA_TRIALS", "KAPPA_DEPTH", "KAPPA_SEED")


@pytest.fixture(autouse=True)
def _clean_kappa_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in KAPPA_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def host_context() -> HostContext:
    return HostContext()
