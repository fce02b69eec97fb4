"""
Shared fixtures: temporary stores and an app wired to them.
"""
import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image
import pypdfium2 as pdfium

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from adapters.json import JsonAdapter
from adapters.sqlite import SqliteAdapter
from settings import Settings


@pytest.fixture
def json_store(tmp_path):
    return JsonAdapter(data_dir=str(tmp_path / "data"))


@pytest.fixture
def sqlite_store(tmp_path):
    store = SqliteAdapter.from_url(f"sqlite:///{tmp_path / 'pinspace.db'}")
    yield store
    store.dispose()


@pytest.fixture(params=["json", "sqlite"])
def store(request, tmp_path):
    """Both storage backends, same contract."""
    if request.param == "json":
        yield JsonAdapter(data_dir=str(tmp_path / "data"))
    else:
        s = SqliteAdapter.from_url(f"sqlite:///{tmp_path / 'pinspace.db'}")
        yield s
        s.dispose()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        storage_backend="json",
        data_dir=str(tmp_path / "api-data"),
        allowed_origins="http://localhost:3000",
        max_upload_bytes=2 * 1024 * 1024,
    )


@pytest.fixture
def client(settings):
    from main import create_app

    with TestClient(create_app(settings)) as c:
        yield c


def make_png(width: int, height: int) -> bytes:
    buf = io.BytesIO()
    Image.new("L", (width, height), color=240).save(buf, format="PNG")
    return buf.getvalue()


def make_pdf(width_pt: float, height_pt: float) -> bytes:
    doc = pdfium.PdfDocument.new()
    doc.new_page(width_pt, height_pt)
    buf = io.BytesIO()
    doc.save(buf)
    doc.close()
    return buf.getvalue()
