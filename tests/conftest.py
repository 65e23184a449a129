from dataclasses import replace

import pytest

from tools.schedule import initialize_state


def only(*ids):
    """
    A fresh schedule with exactly these activities switched on.
    """
    state = initialize_state()
    return {k: replace(e, included=k in ids) for k, e in state.items()}


@pytest.fixture
def only_state():
    return only
