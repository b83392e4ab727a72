import logging

import pytest

from chat_markdown.assemble import to_markdown
from chat_markdown.log import logger
from chat_markdown.soup import from_html


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def parse():
    """First element of an HTML snippet, as a node tree."""
    def _parse(markup):
        return from_html(markup).element_children()[0]
    return _parse


@pytest.fixture
def md():
    def _md(markup, **kwargs):
        return to_markdown(from_html(markup), **kwargs)
    return _md
