import sys

import pytest


# log.pre_arg_parse_setup and post_arg_parse_setup replace the except
# hook of the whole test process.
@pytest.fixture(autouse=True)
def restore_excepthook():
    excepthook = sys.excepthook
    yield
    sys.excepthook = excepthook
