from pathlib import Path

import pytest
from lxml import etree

# keep this before imports from domproxy!
from tests import plugins  # noqa: F401

from domproxy import Document


FILES_PATH = Path(__file__).parent / "files"


@pytest.fixture
def files_path():
    return FILES_PATH


@pytest.fixture
def entities_document(files_path):
    return Document(files_path / "entities.xml")


@pytest.fixture
def html_document():
    return Document(
        "<html><body><p>a<br>b</p></body></html>", parser=etree.HTMLParser()
    )
